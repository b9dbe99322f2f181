import importlib.util
import itertools
from pathlib import Path
from typing import List, Optional

import pluggy
from structlog import get_logger

from approx_entropy import hookspecs
from approx_entropy.models import Logarithm

PROJECT_NAME = "approx_entropy"
# Entry point group of installed plugins, bumped on incompatible hook changes
ENTRYPOINT_GROUP = "approx_entropy_v1"

logger = get_logger()

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class EntropyPluginManager(pluggy.PluginManager):
    def __init__(self):
        super().__init__(PROJECT_NAME)
        self.add_hookspecs(hookspecs)

    def import_path(self, path: Path):
        """Register the Python file at ``path``, or every ``*.py`` in a directory."""
        if path.is_file():
            sources = [path]
        elif path.is_dir():
            sources = sorted(path.glob("*.py"))
        else:
            raise ValueError("Invalid plugin import path", path)

        for source in sources:
            spec = importlib.util.spec_from_file_location(source.stem, source)
            if spec is None or spec.loader is None:
                logger.error("Invalid plugin file", path=source)
                continue
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            self.register(module)
            logger.debug("Plugin imported", path=source)

    def import_plugins(self, path: Optional[Path] = None):
        if path:
            self.import_path(path)
        self.load_setuptools_entrypoints(ENTRYPOINT_GROUP)

        plugins = [name for name, _plugin in self.list_name_plugin()]
        if plugins:
            logger.info("Loaded plugins", plugins=plugins)

    def load_logarithms_from_plugins(self) -> List[Logarithm]:
        logarithms = list(
            itertools.chain.from_iterable(
                self.hook.approx_entropy_register_logarithms()  # type: ignore
            )
        )
        if logarithms:
            logger.debug(
                "Loaded logarithms from plugins",
                logarithms=[logarithm.name for logarithm in logarithms],
            )
        return logarithms
