from smarter_scheduler.core.config import EngineConfig, get_settings


def get_engine_config() -> EngineConfig:
    return EngineConfig.from_settings(get_settings())
