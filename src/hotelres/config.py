from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Optional, Type

from dotenv import load_dotenv

from hotelres.base_config import HotelResConfig
from hotelres.adapters.base import ReservationAdapter, RoomAdapter
from hotelres.adapters.flatfile import FlatFileReservationAdapter, FlatFileRoomAdapter
from hotelres.exceptions import ConfigurationError

load_dotenv()

DEFAULT_CONFIG_CLASS = "hotelres.config.EnvironmentHotelResConfig"
CONFIG_ENV_KEY = "HOTELRES_CONFIG"

logger = logging.getLogger(__name__)


def _import_config_class(path: str) -> Type[HotelResConfig]:
    try:
        module_path, class_name = path.rsplit(".", 1)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid config path '{path}'") from exc

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import module '{module_path}'") from exc

    try:
        cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ConfigurationError(f"Config class '{class_name}' not found in '{module_path}'") from exc

    if not isinstance(cls, type) or not issubclass(cls, HotelResConfig):
        raise ConfigurationError(f"{path} is not a subclass of HotelResConfig")

    return cls


class EnvironmentHotelResConfig(HotelResConfig):
    """Default configuration that reads from environment variables (and .env)."""

    def __init__(self) -> None:
        self._env = os.environ

    def get_data_dir(self) -> Path:
        return Path(self._env.get("HOTELRES_DATA_DIR", "."))

    def get_rooms_file(self) -> Path:
        return self.get_data_dir() / self._env.get("HOTELRES_ROOMS_FILE", "rooms.csv")

    def get_reservations_file(self) -> Path:
        return self.get_data_dir() / self._env.get("HOTELRES_RESERVATIONS_FILE", "reservations.csv")

    def get_refund_cutoff_days(self) -> int:
        raw = self._env.get("HOTELRES_REFUND_CUTOFF_DAYS")
        if raw is None:
            return super().get_refund_cutoff_days()
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid HOTELRES_REFUND_CUTOFF_DAYS: {raw!r}; using default")
            return super().get_refund_cutoff_days()

    def get_log_level(self) -> str:
        return self._env.get("HOTELRES_LOG_LEVEL", super().get_log_level()).upper()

    def get_currency_symbol(self) -> str:
        return self._env.get("HOTELRES_CURRENCY", super().get_currency_symbol())

    def create_room_adapter(self) -> RoomAdapter:
        adapter = FlatFileRoomAdapter(self.get_rooms_file())
        adapter.init(self.get_seed_rooms())
        return adapter

    def create_reservation_adapter(self) -> ReservationAdapter:
        adapter = FlatFileReservationAdapter(self.get_reservations_file())
        adapter.init()
        return adapter


_CONFIG: Optional[HotelResConfig] = None


def get_config() -> HotelResConfig:
    global _CONFIG
    if _CONFIG is None:
        class_path = os.getenv(CONFIG_ENV_KEY, DEFAULT_CONFIG_CLASS)
        cls = _import_config_class(class_path)
        _CONFIG = cls()
    return _CONFIG


def set_config(config: Optional[HotelResConfig]) -> None:
    global _CONFIG
    _CONFIG = config
