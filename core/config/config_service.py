"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir():
            return parent
    return here.parent

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"

ENV_PREFIX = "WATCHFACE_"


class ConfigValueError(ValueError):
    """Raised when a configured value cannot be cast to its field type."""

    def __init__(self, section: str, key: str, value: Any) -> None:
        self.section = section
        self.key = key
        self.value = value
        super().__init__(f"Invalid value for {section}.{key}: {value!r}")


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Format": {
        "default_12_hour": "h:mm a",
        "default_24_hour": "H:mm",
        "locale": "en_US",
    },
    "Ticker": {
        "tick_interval_ms": "1000",
        "wake_interval_ms": "1000",
        "wake_start_delay_ms": "1000",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class FormatConfig:
    default_12_hour: str = "h:mm a"
    default_24_hour: str = "H:mm"
    locale: str = "en_US"


@dataclass
class TickerConfig:
    tick_interval_ms: int = 1000
    wake_interval_ms: int = 1000
    wake_start_delay_ms: int = 1000


@dataclass
class WatchfaceConfig:
    format: FormatConfig
    ticker: TickerConfig


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    # field.type is a string under `from __future__ import annotations`
    if typ in (bool, "bool"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ in (int, "int"):
        return int(value)
    if typ in (float, "float"):
        return float(value)
    if typ in (Path, "Path"):
        return Path(str(value)).expanduser()
    if isinstance(typ, type):
        return typ(value)
    return str(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        try:
            kwargs[field.name] = _cast(val, field.type)
        except (TypeError, ValueError) as exc:
            raise ConfigValueError(cls.__name__, field.name, val) from exc
    return cls(**kwargs)


def _env_overlays(environ: Optional[Dict[str, str]] = None) -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in (os.environ if environ is None else environ).items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "Watchface" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "watchface" / "config.ini"


def _read_layer(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """
    Facade merging layered configuration with type safety.

    Layers, later wins:
        0) embedded defaults
        1) core/config/defaults.ini
        2) environment variables WATCHFACE_<SECTION>__<KEY>
        3) core/config/config.ini (machine)
        4) user config.ini

    Nothing is written to disk.
    """

    def __init__(
        self,
        *,
        defaults_ini: Path = DEFAULTS_INI,
        machine_ini: Path = MACHINE_INI,
        user_ini: Optional[Path] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> None:
        self._lock = RLock()
        self._defaults_ini = defaults_ini
        self._machine_ini = machine_ini
        self._user_ini = user_ini
        self._environ = environ
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if self._defaults_ini.exists():
                _apply(merged, _read_layer(self._defaults_ini), "defaults.ini",
                       str(self._defaults_ini), sources)

            # Layer 2: environment variables
            env = _env_overlays(self._environ)
            _apply(merged, env, "env", "os.environ", sources)

            # Layer 3: machine config
            if self._machine_ini.exists():
                _apply(merged, _read_layer(self._machine_ini), "machine",
                       str(self._machine_ini), sources)

            # Layer 4: user overrides
            user_ini = self._user_ini if self._user_ini is not None else _user_config_path()
            if user_ini.exists():
                _apply(merged, _read_layer(user_ini), "user", str(user_ini), sources)

            self._sources = sources

            self.format = _build_dataclass(FormatConfig, merged.get("Format", {}))
            self.ticker = _build_dataclass(TickerConfig, merged.get("Ticker", {}))

    @property
    def watchface(self) -> WatchfaceConfig:
        return WatchfaceConfig(format=self.format, ticker=self.ticker)

    # ------------------------------------------------------------------ #
    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


# Global singleton, created on first use
_config_service: Optional[ConfigService] = None
_SINGLETON_LOCK = RLock()


def get_config_service() -> ConfigService:
    global _config_service
    with _SINGLETON_LOCK:
        if _config_service is None:
            _config_service = ConfigService()
        return _config_service
