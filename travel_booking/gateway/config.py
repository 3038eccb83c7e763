from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = os.getenv("HOTEL_API_BASE_URL", "https://hotelapi.loyalty.dev")
    timeout: float = float(os.getenv("HOTEL_API_TIMEOUT", "30"))
    lang: str = os.getenv("HOTEL_API_LANG", "en_US")
    currency: str = os.getenv("HOTEL_API_CURRENCY", "SGD")
    country_code: str = os.getenv("HOTEL_API_COUNTRY_CODE", "SG")
    partner_id: int = int(os.getenv("HOTEL_API_PARTNER_ID", "1"))


DEFAULT_GATEWAY_CONFIG = GatewayConfig()
