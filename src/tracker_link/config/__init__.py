from .linker_config import LinkerConfig, ConfigLoader, ConfigValidator, EnvConfigLoader, build_linker

__all__ = ['LinkerConfig', 'ConfigLoader', 'ConfigValidator', 'EnvConfigLoader', 'build_linker']
