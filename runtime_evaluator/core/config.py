"""
Evaluator settings, read from EVALUATOR_* environment variables or a .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_IMPLICIT_LIBRARIES = (
    "math,json,datetime,re,collections,itertools,functools,"
    "statistics,decimal,fractions"
)


def _split_csv(raw: str | None) -> frozenset[str]:
    return frozenset(s.strip() for s in (raw or "").split(",") if s.strip())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVALUATOR_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "runtime-evaluator"

    # Language tokens the session normalizes directives and binding names against
    NAMESPACE_KEYWORD: str = "using"
    STATEMENT_TERMINATOR: str = ";"
    SELF_REFERENCE_TOKEN: str = "this"

    # Modules `using` may import without an explicit library reference
    IMPLICIT_LIBRARIES: str = _DEFAULT_IMPLICIT_LIBRARIES

    # Script run once when an engine is created (empty: no initial statements)
    INITIAL_SCRIPT: str = ""

    @property
    def implicit_libraries(self) -> frozenset[str]:
        return _split_csv(self.IMPLICIT_LIBRARIES)


settings = Settings()
