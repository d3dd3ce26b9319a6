"""Pick a configuration source from query parameters and load it.

A page can receive its parameters three ways, checked in this order:
``share`` (short code), ``configId`` (saved record) and ``config`` (inline
JSON). :class:`ConfigLoader` keeps the per-page state that decides whether a
source was already applied and cancels the previous load when a new one starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Union

from .loaders import (
    CancellationToken,
    FetchFn,
    LoadCancelled,
    LoadResult,
    load_saved_config_parameters,
    load_shared_config_parameters,
    parse_config_param,
)
from .schema import MapType
from .validation import check_parameter_stability

logger = logging.getLogger(__name__)


@dataclass
class ConfigLoaderState:
    errors: List[str] = field(default_factory=list)
    show_error: bool = False
    warnings: List[str] = field(default_factory=list)
    show_warning: bool = False
    is_loading: bool = False

    def reset(self) -> None:
        self.errors = []
        self.show_error = False
        self.warnings = []
        self.show_warning = False
        self.is_loading = False


def config_source_key(query: Mapping[str, str]) -> Optional[str]:
    if query.get("share"):
        return f"share:{query['share']}"
    if query.get("configId"):
        return f"id:{query['configId']}"
    if query.get("config"):
        return f"param:{query['config']}"
    return None


class ConfigLoader:
    """Load parameters for one visualization page.

    Args:
        map_type: Map type rendered by the page.
        on_parameters_loaded: Called with the validated parameters.
        base: Prefix for API URLs.
        fetch_fn: Fetch function forwarded to the loaders.
        session_store: One-shot transfer cache for saved configurations.
    """

    def __init__(
        self,
        map_type: Union[str, MapType],
        on_parameters_loaded: Callable[[Dict[str, Any]], None],
        *,
        base: str = "",
        fetch_fn: Optional[FetchFn] = None,
        session_store: Optional[MutableMapping[str, str]] = None,
    ) -> None:
        self.map_type = MapType(map_type)
        self.on_parameters_loaded = on_parameters_loaded
        self.base = base
        self.fetch_fn = fetch_fn
        self.session_store = session_store
        self.state = ConfigLoaderState()
        self.last_applied_key: Optional[str] = None
        self._token: Optional[CancellationToken] = None

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None

    def load(self, query: Mapping[str, str]) -> ConfigLoaderState:
        key = config_source_key(query)
        if key == self.last_applied_key:
            return self.state
        self.last_applied_key = key
        self.cancel()
        self.state.reset()

        if key is None:
            return self.state

        token = CancellationToken()
        self._token = token
        self.state.is_loading = True
        try:
            result = self._fetch(query, token)
        except LoadCancelled:
            logger.debug("Configuration load for %s was cancelled", key)
            return self.state
        except Exception as exc:
            logger.exception("Failed to load configuration")
            self.state.errors = [f"Failed to load configuration: {exc}"]
            self.state.show_error = True
            self.state.is_loading = False
            return self.state

        if token.cancelled or self.last_applied_key != key:
            return self.state
        self.state.is_loading = False
        self._apply(result)
        return self.state

    def _fetch(self, query: Mapping[str, str], token: CancellationToken) -> LoadResult:
        if query.get("share"):
            return load_shared_config_parameters(
                query["share"], self.map_type, self.base, self.fetch_fn, token=token
            )
        if query.get("configId"):
            return load_saved_config_parameters(
                query["configId"],
                self.map_type,
                self.base,
                self.fetch_fn,
                session_store=self.session_store,
                token=token,
            )
        return parse_config_param(self.map_type, query["config"])

    def _apply(self, result: LoadResult) -> None:
        if not result.ok:
            self.state.errors = list(result.errors)
            self.state.show_error = True
            return

        self.on_parameters_loaded(result.parameters)
        stability = check_parameter_stability(self.map_type, result.parameters)
        if not stability.is_stable:
            self.state.warnings = stability.warnings
            self.state.show_warning = True
