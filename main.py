from __future__ import annotations

from typing import Any, Dict

from fastapi import Depends

from bootstrap.application import create_app
from hybrid.Config.Repository import Repository
from hybrid.Foundation.Http import create_fastapi_app, resolve

hybrid_app = create_app()

app = create_fastapi_app(hybrid_app, title='Hybrid')


@app.get('/')
def index(config: Repository = Depends(resolve('config'))) -> Dict[str, Any]:
    return {
        'name': config.get('app.name'),
        'environment': hybrid_app.environment(),
        'version': hybrid_app.version(),
    }


if __name__ == '__main__':
    import uvicorn

    uvicorn.run('main:app', host='0.0.0.0', port=8000, reload=hybrid_app.has_debug_mode_enabled())
