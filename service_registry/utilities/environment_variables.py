from service_registry.utilities.environment_reader import EnvironmentReader


class EnvironmentVariables:
    STATS_LOGGING: str = "SERVICE_REGISTRY_STATS_LOGGING"

    @property
    def stats_logging_enabled(self) -> bool:
        """Whether new registries time their lookups by default"""
        return EnvironmentReader.read_flag(self.STATS_LOGGING)
