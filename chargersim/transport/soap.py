"""
Request/response OCPP-S transport.

Inbound: a FastAPI app served by uvicorn on the configured port implements
the charge point service. Outbound: an httpx client posts to the Central
System endpoint and advertises the listener as the callback address. There
is no session; every call is one HTTP round trip.
"""

import asyncio
import dataclasses

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from loguru import logger
from ocpp.charge_point import camel_to_snake_case, remove_nones, snake_to_camel_case
from ocpp.v16 import call_result

from chargersim.handlers.remote_commands import UnknownActionError
from chargersim.transport import soap_envelope
from chargersim.transport.proxy import CentralSystemProxy


def create_charge_point_app(get_handler, charger_identity: str):
    """
    Build the ASGI app answering Central System requests.

    ``get_handler`` returns the registered RemoteCommandHandler at request
    time, so the app can be built before the handler exists.
    """
    app = FastAPI(title=f"Charge Point {charger_identity}", docs_url=None, redoc_url=None)

    @app.post("/")
    async def charge_point_service(request: Request):
        data = await request.body()
        try:
            action, payload, headers = soap_envelope.parse_envelope(data)
        except soap_envelope.SoapFault as e:
            logger.warning(f"OCPP-S in: undecodable request: {e}")
            return _soap_response(soap_envelope.build_fault(str(e), code="Sender"), 400)

        logger.debug(f"OCPP-S in: {action} {payload}")
        try:
            result = await get_handler().dispatch(action, camel_to_snake_case(payload))
        except UnknownActionError:
            logger.warning(f"OCPP-S in: unsupported action {action}")
            return _soap_response(soap_envelope.build_fault(f"Unsupported action {action}"), 500)
        except Exception as e:
            logger.error(f"OCPP-S in: {action} failed: {e}")
            return _soap_response(soap_envelope.build_fault(str(e)), 500)

        body = snake_to_camel_case(remove_nones(result))
        logger.debug(f"OCPP-S out: {action}Response {body}")
        return _soap_response(
            soap_envelope.build_response(
                action,
                body,
                soap_envelope.CHARGE_POINT_NS,
                relates_to=headers.get("MessageID"),
            )
        )

    return app


def _soap_response(content, status_code=200):
    return Response(
        content=content, status_code=status_code, media_type=soap_envelope.CONTENT_TYPE
    )


class SoapTransport:
    """OCPP 1.6 SOAP: bound charge point service plus Central System client."""

    name = "soap"

    def __init__(self, config, http_transport=None):
        self.config = config
        self.handler = None
        self.app = create_charge_point_app(lambda: self.handler, config.charger_identity)
        self.client = httpx.AsyncClient(timeout=None, transport=http_transport)
        self.server = None
        self._server_task = None
        self.proxy = CentralSystemProxy(self.send)

    def register_handler(self, handler):
        self.handler = handler

    async def connect(self):
        """Bind the charge point service, then return the Central System client."""
        await self.start_server()
        logger.info(f"Started SOAP Charge Point server at {self.config.callback_url}")
        logger.info(f"Will send messages to Central System at {self.config.central_system_endpoint}")
        return self.proxy

    async def start_server(self):
        server_config = uvicorn.Config(
            self.app,
            host="0.0.0.0",
            port=self.config.charge_point_port,
            log_level="warning",
            log_config=None,
            lifespan="off",
        )
        self.server = uvicorn.Server(server_config)
        self._server_task = asyncio.create_task(self.server.serve())
        while not self.server.started:
            if self._server_task.done():
                raise OSError(f"Could not bind charge point service on port {self.config.charge_point_port}")
            await asyncio.sleep(0.05)

    async def send(self, payload):
        action = type(payload).__name__
        if action.endswith("Payload"):
            action = action[: -len("Payload")]
        body = snake_to_camel_case(remove_nones(dataclasses.asdict(payload)))

        envelope = soap_envelope.build_request(
            action,
            body,
            soap_envelope.CENTRAL_SYSTEM_NS,
            charge_box_identity=self.config.charger_identity,
            to=self.config.central_system_endpoint,
            reply_to=self.config.callback_url,
        )
        logger.debug(f"OCPP-S out: {action} {body}")

        response = await self.client.post(
            self.config.central_system_endpoint,
            content=envelope,
            headers={"Content-Type": f'{soap_envelope.CONTENT_TYPE}; action="/{action}"'},
        )
        _, result, _ = soap_envelope.parse_envelope(response.content)
        response.raise_for_status()
        logger.debug(f"OCPP-S in: {action}Response {result}")

        return _as_call_result(action, camel_to_snake_case(result))

    async def disconnect(self):
        logger.info("SOAP transport has no persistent connection to close")

    async def close(self):
        if self.server is not None:
            self.server.should_exit = True
            await self._server_task
        await self.client.aclose()


def _as_call_result(action, payload):
    result_class = getattr(call_result, action)
    fields = {field.name for field in dataclasses.fields(result_class)}
    return result_class(**{key: value for key, value in payload.items() if key in fields})
