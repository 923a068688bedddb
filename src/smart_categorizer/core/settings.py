import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from smart_categorizer.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"
MODEL_FILENAME = "categorization_model.bin"
RULES_FILENAME = "rules.json"
PAYEES_FILENAME = "payees.json"

DEFAULT_ML_CONFIDENCE_THRESHOLD = 0.5
DEFAULT_BATCH_WORKERS = 4

_CONFIG_FILE_PATH: str | None = None
_CONFIG_FILE_VALUES: dict[str, str] = {}

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "DATA_DIR",
    "MODEL_PATH",
    "RULES_PATH",
    "PAYEES_PATH",
    "ML_CONFIDENCE_THRESHOLD",
    "BATCH_WORKERS",
    "USE_DEFAULT_RULES",
    "HOST",
    "PORT",
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    cwd = os.getcwd()
    candidate = os.path.join(cwd, "config", CONFIG_FILENAME)
    if os.path.exists(candidate):
        return candidate
    return os.path.join(cwd, CONFIG_FILENAME)


def _unquote_value(raw_value: str) -> str:
    if len(raw_value) >= 2 and raw_value[0] == raw_value[-1] and raw_value[0] in {'"', "'"}:
        return raw_value[1:-1]
    return raw_value


def read_config_file(path: str | None) -> dict[str, str]:
    """Read flat `KEY: value` lines; comments and blank values are skipped."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            key = key.strip()
            cleaned = raw_value.split(" #", 1)[0].strip()
            if key and cleaned:
                values[key] = _unquote_value(cleaned)
    return values


def load_environment() -> None:
    global _CONFIG_FILE_PATH
    global _CONFIG_FILE_VALUES

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _resolve_config_path()
    _CONFIG_FILE_VALUES = read_config_file(_CONFIG_FILE_PATH)

    for key in _CONFIG_KEYS:
        if key not in os.environ and key in _CONFIG_FILE_VALUES:
            os.environ[key] = _CONFIG_FILE_VALUES[key]


def ensure_dir(path: str | None) -> None:
    if path and path not in {".", "./"}:
        os.makedirs(path, exist_ok=True)


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_float(
    name: str,
    default: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if (min_value is not None and value < min_value) or (max_value is not None and value > max_value):
        logger.warning(
            "[ENV] %s='%s' outside [%s, %s], using default %s.",
            name,
            raw,
            min_value,
            max_value,
            default,
        )
        return default
    return value


def get_env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if not raw:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
    return default


@dataclass(frozen=True)
class EngineSettings:
    data_dir: str
    model_path: str
    rules_path: str
    payees_path: str
    ml_threshold: float
    batch_workers: int
    use_default_rules: bool


def get_settings() -> EngineSettings:
    data_dir = os.getenv("DATA_DIR", ".")
    return EngineSettings(
        data_dir=data_dir,
        model_path=os.getenv("MODEL_PATH") or os.path.join(data_dir, MODEL_FILENAME),
        rules_path=os.getenv("RULES_PATH") or os.path.join(data_dir, RULES_FILENAME),
        payees_path=os.getenv("PAYEES_PATH") or os.path.join(data_dir, PAYEES_FILENAME),
        ml_threshold=get_env_float(
            "ML_CONFIDENCE_THRESHOLD",
            DEFAULT_ML_CONFIDENCE_THRESHOLD,
            min_value=0.0,
            max_value=1.0,
        ),
        batch_workers=get_env_int("BATCH_WORKERS", DEFAULT_BATCH_WORKERS, min_value=1),
        use_default_rules=get_env_bool("USE_DEFAULT_RULES", True),
    )


def log_environment() -> None:
    logger.info("[ENV] Configuration file: %s", _CONFIG_FILE_PATH or "<none>")
    for key in _CONFIG_KEYS:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else raw_value.replace("\n", "\\n")
        logger.info("[ENV] %s=%s", key, value)


load_environment()
