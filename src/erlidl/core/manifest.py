import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import LoadError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "erlidl.toml"


@dataclass
class GeneratorConfig:
    """
    Generator configuration.

    Examples in erlidl.toml:

        [erlidl]
        out_dir = "gen-erl"
        namespace = "acme"
        indent = 4
        log_level = "INFO"
    """

    out_dir: Path = field(default_factory=lambda: Path("gen-erl"))
    namespace: str | None = None  # For programs that declare no namespace
    indent: int = 2  # Spaces per indentation level
    log_level: str = "WARNING"


def load_config(path: Path | None = None) -> GeneratorConfig:
    """
    Load generator configuration from a TOML file.

    Args:
        path: Config file; ``erlidl.toml`` in the working directory if omitted

    Returns:
        GeneratorConfig, all defaults when the file does not exist

    Raises:
        LoadError: If the file exists but is not valid TOML
    """
    explicit = path is not None
    path = path or Path.cwd() / CONFIG_FILENAME
    if not path.exists():
        if explicit:
            raise LoadError(f"Config file not found: {path}")
        return GeneratorConfig()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise LoadError(f"Invalid config file {path}: {e}") from e

    section = data.get("erlidl", {})
    config = GeneratorConfig()
    if "out_dir" in section:
        config.out_dir = Path(section["out_dir"])
    if "namespace" in section:
        config.namespace = str(section["namespace"])
    if "indent" in section:
        indent = section["indent"]
        if not isinstance(indent, int) or indent < 0:
            raise LoadError(f"Invalid indent in {path}: {indent!r}")
        config.indent = indent
    if "log_level" in section:
        config.log_level = str(section["log_level"]).upper()

    logger.debug("Loaded config from %s", path)
    return config
