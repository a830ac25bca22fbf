from jargo.config import ConfigError, JargoConfig, load_config
from jargo.pipeline import BuildStage, PipelineResult, run_pipeline
from jargo.scaffold import ScaffoldError, create_new_project

__all__ = [
    "BuildStage",
    "ConfigError",
    "JargoConfig",
    "PipelineResult",
    "ScaffoldError",
    "create_new_project",
    "load_config",
    "run_pipeline",
]
