"""
arborlog: hierarchical category logging.

Categories form a tree; each has runtime settings (level, format, sink type)
inherited from a default configuration or a subtree override. Loggers are
handed out per root category and deliver messages to their sink in the exact
order they were logged, even while an attached error's stack is still being
rendered asynchronously.

Usage:
    from arborlog import Category, get_logger

    root = Category("app")
    db = Category("db", root)
    log = get_logger(root)
    log.info("connected", categories=[db])
"""

from .category import Category
from .configuration import CategoryConfiguration, CategorySettings
from .delegate import DelegateLogger
from .dispatch import CategoryLogger
from .exceptions import (
    ArborLogError,
    CategoryNotRegistered,
    CategoryServiceMismatch,
    ConfigurationError,
    ConflictingFormatterConfiguration,
    InvalidArgument,
    InvalidCategoryName,
    NonRootCategoryLookup,
    NullCategoryElement,
)
from .levels import CategoryLogFormat, DateFormat, DateFormatStyle, LoggerType, LogLevel
from .message import LogData, LogMessage
from .registry import RuntimeSettings
from .service import (
    CategoryService,
    clear,
    get_logger,
    get_runtime_settings,
    get_service,
    set_configuration_category,
    set_default_configuration,
    use_service,
)
from .sinks import BaseSink, CallbackSink, ConsoleSink, MessageBufferSink, RawConsoleSink

__version__ = "0.1.0"

__all__ = [
    "ArborLogError",
    "BaseSink",
    "CallbackSink",
    "Category",
    "CategoryConfiguration",
    "CategoryLogFormat",
    "CategoryLogger",
    "CategoryNotRegistered",
    "CategoryService",
    "CategoryServiceMismatch",
    "CategorySettings",
    "ConfigurationError",
    "ConflictingFormatterConfiguration",
    "ConsoleSink",
    "DateFormat",
    "DateFormatStyle",
    "DelegateLogger",
    "InvalidArgument",
    "InvalidCategoryName",
    "LogData",
    "LogLevel",
    "LogMessage",
    "LoggerType",
    "MessageBufferSink",
    "NonRootCategoryLookup",
    "NullCategoryElement",
    "RawConsoleSink",
    "RuntimeSettings",
    "clear",
    "get_logger",
    "get_runtime_settings",
    "get_service",
    "set_configuration_category",
    "set_default_configuration",
    "use_service",
]
