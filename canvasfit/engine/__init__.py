# Resize engine: analysis, strategies, tiered placement and orchestration.
#
# Submodules are imported directly (canvasfit.engine.layout_engine, ...);
# the constraints package depends on engine.geometry, so nothing is
# re-exported here.
