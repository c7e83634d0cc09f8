from os import environ


class EnvironmentReader:
    TRUTHY_VALUES: tuple[str, ...] = ("true", "1")

    @staticmethod
    def is_truthy(value: str | bool | int | None) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() in EnvironmentReader.TRUTHY_VALUES
        return bool(value)

    @staticmethod
    def read_flag(name: str, *, default: bool = False) -> bool:
        """Read a boolean flag, using default when the variable is unset or blank"""
        value: str | None = environ.get(name)
        if value is None or not value.strip():
            return default
        return EnvironmentReader.is_truthy(value)
