"""Plugin registry for the omx tools.

Tool classes register themselves with ``@register_tool()`` when their module
is imported. ``discover_and_register_tools`` walks the ``omx_tools`` package
so that every tool module gets imported once at server start.
"""

import importlib
import inspect
import logging
import pkgutil
import time
from contextlib import contextmanager
from typing import Dict, List, Optional, Set, Type

from omx_tools.interfaces import ToolInterface

logger = logging.getLogger(__name__)


@contextmanager
def time_plugin_operation(name: str):
    """Log how long a registry operation took."""
    started = time.time()
    logger.info(f"{name} started")
    try:
        yield
    finally:
        logger.info(f"{name} took {time.time() - started:.2f}s")


class PluginRegistry:
    """Process-wide mapping from tool name to tool class.

    Instances are created lazily on first lookup and then reused, so a tool
    keeps whatever state it holds for the lifetime of the server.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(PluginRegistry, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.tools: Dict[str, Type[ToolInterface]] = {}
        self.instances: Dict[str, ToolInterface] = {}
        self.discovered_paths: Set[str] = set()

    def register_tool(self, tool_class: Type[ToolInterface]) -> Optional[Type[ToolInterface]]:
        """Add a concrete tool class under the name its instances report.

        Abstract classes are skipped and None is returned for them. A class
        registered under a name already in use replaces the previous one.

        Raises:
            TypeError: If ``tool_class`` is not a ToolInterface subclass
        """
        if not inspect.isclass(tool_class):
            raise TypeError(f"register_tool expects a class, got {type(tool_class).__name__}")
        if not issubclass(tool_class, ToolInterface):
            raise TypeError(f"{tool_class.__name__} is not a ToolInterface")
        if inspect.isabstract(tool_class):
            logger.debug(f"Not registering abstract tool base {tool_class.__name__}")
            return None

        try:
            tool_name = tool_class().name
        except Exception as e:
            logger.error(f"Cannot instantiate {tool_class.__name__} to read its name: {e}")
            return None

        previous = self.tools.get(tool_name)
        if previous is not None and previous is not tool_class:
            logger.warning(
                f"{tool_class.__name__} replaces {previous.__name__} as tool {tool_name}"
            )
            self.instances.pop(tool_name, None)

        self.tools[tool_name] = tool_class
        logger.debug(f"Registered tool {tool_name} ({tool_class.__name__})")
        return tool_class

    def get_tool_instance(self, tool_name: str) -> Optional[ToolInterface]:
        """Return the shared instance of a tool, or None for an unknown name.

        Names are matched exactly first, then case-insensitively.
        """
        key = self._resolve_name(tool_name)
        if key is None:
            logger.warning(f"No tool named '{tool_name}'")
            return None

        instance = self.instances.get(key)
        if instance is None:
            try:
                instance = self.tools[key]()
            except Exception as e:
                logger.error(f"Cannot instantiate tool {key}: {e}")
                return None
            self.instances[key] = instance
        return instance

    def _resolve_name(self, tool_name: str) -> Optional[str]:
        if tool_name in self.tools:
            return tool_name
        wanted = tool_name.lower()
        for name in self.tools:
            if name.lower() == wanted:
                return name
        return None

    def discover_tools(self, package_name: str = "omx_tools") -> None:
        """Import every module below ``package_name`` and register its tools.

        Modules that fail to import are logged and skipped; the remaining
        tools stay available.
        """
        try:
            package = importlib.import_module(package_name)
        except ImportError as e:
            logger.error(f"Cannot import tool package {package_name}: {e}")
            return

        prefix = f"{package_name}."
        for module_info in pkgutil.walk_packages(getattr(package, "__path__", []), prefix):
            if module_info.name in self.discovered_paths:
                continue
            self.discovered_paths.add(module_info.name)
            try:
                module = importlib.import_module(module_info.name)
            except Exception as e:
                logger.warning(f"Skipping tool module {module_info.name}: {e}")
                continue
            self._scan_module_for_tools(module)

    def _scan_module_for_tools(self, module) -> None:
        """Register concrete tools defined in ``module`` that are not yet known."""
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__ or not issubclass(obj, ToolInterface):
                continue
            if inspect.isabstract(obj) or obj in self.tools.values():
                continue
            self.register_tool(obj)

    def get_all_instances(self) -> List[ToolInterface]:
        """Instances of every registered tool, in registration order."""
        instances = (self.get_tool_instance(name) for name in list(self.tools))
        return [instance for instance in instances if instance is not None]

    def clear(self) -> None:
        """Forget all tools, instances and scanned modules."""
        self.tools.clear()
        self.instances.clear()
        self.discovered_paths.clear()


registry = PluginRegistry()


def register_tool(cls=None):
    """Class decorator adding a tool to the shared registry.

    Usable bare (``@register_tool``) or called (``@register_tool()``). The
    class itself is returned unchanged.
    """

    def _register(tool_class):
        registry.register_tool(tool_class)
        return tool_class

    if cls is None:
        return _register
    return _register(cls)


def discover_and_register_tools() -> None:
    """Import all omx tool modules so their tools are registered."""
    with time_plugin_operation("Tool discovery"):
        registry.discover_tools("omx_tools")
    logger.info(f"{len(registry.tools)} tools registered: {', '.join(sorted(registry.tools))}")
