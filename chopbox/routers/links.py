"""
Short-link expansion — GET /links/expand?url=<bit.ly link>
"""
import logging

from fastapi import APIRouter, Query

from chopbox.clients.bitly_client import BitlyConfig, bitly_client, parse_hash
from chopbox.config import settings
from chopbox.schemas import ExpandResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/expand", response_model=ExpandResponse)
async def expand(url: str = Query(..., min_length=1, description="bit.ly short URL or hash")):
    config = BitlyConfig.from_settings(settings)
    short_hash = parse_hash(url)
    long_url = await bitly_client.expand_hash(config, short_hash)
    return ExpandResponse(short_url=url, hash=short_hash, long_url=long_url)
