"""Feature modules with auto-discovery."""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Import every feature module and collect its router.

    Importing a module also registers its authorization policies, so
    modules without routes are imported all the same. A module exposes
    HTTP routes through a ``router`` in its ``routes`` submodule.

    Returns:
        List of FastAPI routers from discovered modules.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if not path.is_dir() or path.name.startswith("_"):
            continue
        import_module(f"zena.modules.{path.name}")

        router = None
        if (path / "routes.py").exists():
            routes = import_module(f"zena.modules.{path.name}.routes")
            router = getattr(routes, "router", None)
            if isinstance(router, APIRouter):
                routers.append(router)
        logger.debug("module_loaded", module=path.name, has_router=router is not None)

    return routers
