"""
swift-wire - Formatter Registry

Static mapping from OutputFormat to the encoder class that produces it.
"""

import logging
from typing import Dict, List, Optional, Type, Union

from swift_wire.core.config import Config, FormatConfig
from swift_wire.core.exceptions import FormatError
from swift_wire.core.metrics import WireMetrics
from swift_wire.formatters.base import MessageFormatter
from swift_wire.formatters.dos_pcc import DosPccFormatter
from swift_wire.formatters.fin import FinFormatter
from swift_wire.formatters.rje import RjeFormatter
from swift_wire.protocols.swift.network_wrapper import NetworkWrapper
from swift_wire.protocols.swift.swift_codes import OutputFormat

logger = logging.getLogger(__name__)

FORMATTER_REGISTRY: Dict[OutputFormat, Type[MessageFormatter]] = {
    OutputFormat.FIN: FinFormatter,
    OutputFormat.RJE: RjeFormatter,
    OutputFormat.DOS_PCC: DosPccFormatter,
}


def supported_formats() -> List[OutputFormat]:
    return list(FORMATTER_REGISTRY)


def resolve_format(output_format: Union[OutputFormat, str]) -> OutputFormat:
    """Accept an OutputFormat or any of its names and aliases."""
    if isinstance(output_format, OutputFormat):
        return output_format
    try:
        return OutputFormat.from_code(output_format)
    except ValueError as e:
        raise FormatError(str(e), offending_value=output_format) from e


def create_formatter(
    output_format: Union[OutputFormat, str],
    config: Optional[Union[Config, FormatConfig]] = None,
    metrics: Optional[WireMetrics] = None,
    wrapper: Optional[NetworkWrapper] = None,
) -> MessageFormatter:
    """
    Build the encoder for ``output_format``.

    ``config`` may be a full Config (its section for the format, its batch
    limit and its network settings are used) or a single FormatConfig.
    """
    resolved = resolve_format(output_format)
    formatter_class = FORMATTER_REGISTRY[resolved]

    if isinstance(config, Config):
        if wrapper is None:
            wrapper = NetworkWrapper(
                lt_address=config.network.lt_address,
                info_suffix=config.network.info_suffix,
            )
        formatter = formatter_class(
            config.format_config(resolved),
            wrapper=wrapper,
            metrics=metrics,
            max_batch_size=config.max_batch_size,
        )
    else:
        formatter = formatter_class(config, wrapper=wrapper, metrics=metrics)

    logger.debug("Created %s for %s", formatter_class.__name__, resolved.code)
    return formatter
