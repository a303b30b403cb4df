import os
from dataclasses import dataclass

from dotenv import load_dotenv

from tracker.windows import Frequency

EXPORT_FORMATS = ("xlsx", "csv")


@dataclass(frozen=True)
class Settings:
    seed_path: str = "data/seed.json"
    default_frequency: Frequency = Frequency.LAST_30_DAYS
    currency: str = "₹"
    export_format: str = "xlsx"


def _frequency(value: str) -> Frequency:
    try:
        return Frequency(value)
    except ValueError:
        return Settings.default_frequency


def load_settings(env: dict | None = None) -> Settings:
    """Read settings from the process environment (after .env) or a given mapping."""
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    export_format = env.get("TRACKER_EXPORT_FORMAT", Settings.export_format).lower()
    if export_format not in EXPORT_FORMATS:
        export_format = Settings.export_format

    return Settings(
        seed_path=env.get("TRACKER_SEED_PATH", Settings.seed_path),
        default_frequency=_frequency(env.get("TRACKER_DEFAULT_FREQUENCY", Settings.default_frequency.value)),
        currency=env.get("TRACKER_CURRENCY", Settings.currency),
        export_format=export_format,
    )
