from __future__ import annotations

from order_desk.adapters.inbound.web.fastapi_app import create_app
from order_desk.bootstrap import build_usecases

usecases = build_usecases()
app = create_app(usecases)
