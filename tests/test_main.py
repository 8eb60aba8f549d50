import uvicorn

from app import main
from app.config import HOST, PORT


def test_run_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

    main.run()

    assert calls == [(("app.main:app",), {"host": HOST, "port": PORT, "log_level": main.LOG_LEVEL.lower()})]
