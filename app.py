"""FastAPI bootstrap wiring an in-memory OIFLOW snapshot store."""
from fastapi import FastAPI

from oiflow.config import INSTRUMENTS
from oiflow.state.snapshot_store import SnapshotStateStore
from oiflow.state import analysis_api


def create_app(instruments=None) -> FastAPI:
    app = FastAPI(title="OIFLOW Analysis API", version="0.1.0")

    store = SnapshotStateStore()
    for instrument in instruments or INSTRUMENTS:
        # Pre-create state so status is available before the first cycle
        store.get_state(instrument)

    analysis_api.attach_to_app(app, store)

    return app


app = create_app()
