"""
Client for the external pizza factory that fulfils accepted orders.

The contract is call-and-wait: one POST, no retries. A 2xx answer carries the
factory's signed order token and a report link; anything else becomes an
UpstreamFailure with whatever report link the factory returned.
"""
from dataclasses import dataclass
import httpx
from core.exceptions import UpstreamFailure
from settings.config import settings
from utils.log_shipper import log_shipper
from utils.logger import get_logger

logger = get_logger("Factory_Client")

FACTORY_FAILURE_MESSAGE = "Failed to fulfill order at factory"

@dataclass
class FactoryResult:
    jwt: str | None
    report_url: str | None

def _parse_json(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"body": body}

async def submit_order(diner: dict, order: dict) -> FactoryResult:
    payload = {"diner": diner, "order": order}
    url = f"{settings.FACTORY_URL.rstrip('/')}/api/order"
    headers = {"Authorization": f"Bearer {settings.FACTORY_API_KEY}"}
    logger.info(f"Submitting order {order.get('id')} for diner {diner.get('id')} to factory")
    try:
        async with httpx.AsyncClient(timeout=settings.FACTORY_TIMEOUT_SECONDS) as client:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Factory unreachable: {e}")
        log_shipper.log_factory(payload, {"error": str(e)})
        raise UpstreamFailure(FACTORY_FAILURE_MESSAGE)

    body = _parse_json(response)
    log_shipper.log_factory(payload, body)
    if response.is_success:
        logger.info(f"Factory accepted order {order.get('id')}")
        return FactoryResult(jwt=body.get("jwt"), report_url=body.get("reportUrl"))

    logger.warning(f"Factory rejected order {order.get('id')} with status {response.status_code}")
    raise UpstreamFailure(FACTORY_FAILURE_MESSAGE, report_url=body.get("reportUrl"))
