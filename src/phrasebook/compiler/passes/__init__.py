from .pass_base import Context, PassManager, Analysis, Transform, AnalysisObject, handles
