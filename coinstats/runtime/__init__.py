"""
coinstats.runtime
=================

Execution infrastructure for experiment templates.

Key Components
--------------
- `ExperimentTemplate`: Base class for all experiment definitions
- `AnalysisResult`: Standard result container for experiment outcomes
- `SequentialRunner`: Look-by-look execution of one template
- `BatchRunner`: Several templates fed the same observations
"""
