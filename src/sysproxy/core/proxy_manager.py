"""Read and write desktop-wide proxy settings.

Supported desktops:
- GNOME: GSettings schemas under ``org.gnome.system.proxy`` via ``gsettings``
- KDE: ``Proxy Settings`` group of ``kioslaverc`` via ``kreadconfig5``/``kwriteconfig5``

The desktop is resolved once when ``SystemProxyManager`` is created. Writes are
applied key by key with no rollback: a failure part-way through
``set_system_proxy`` leaves earlier writes in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
from typing import Final, Mapping

from sysproxy.core.codec import (
    MAX_PORT,
    format_bypass_list,
    format_gsettings_str,
    format_kde_endpoint,
    parse_bypass_list,
    parse_kde_endpoint,
    parse_port,
    strip_quotes,
)
from sysproxy.core.desktop import DesktopEnvironment, detect, read_desktop_signal
from sysproxy.core.errors import NotSupportError, SysproxyError
from sysproxy.core.stores import SettingKey, SettingsStore, store_for

logger = logging.getLogger(__name__)

_SCHEMA_PROXY: Final[str] = "org.gnome.system.proxy"
_GNOME_MODE_KEY = SettingKey(_SCHEMA_PROXY, "mode")
_GNOME_IGNORE_HOSTS_KEY = SettingKey(_SCHEMA_PROXY, "ignore-hosts")
_GNOME_MODE_MANUAL: Final[str] = "manual"
_GNOME_MODE_NONE: Final[str] = "none"

_KDE_GROUP: Final[str] = "Proxy Settings"
_KDE_PROXY_TYPE_KEY = SettingKey(_KDE_GROUP, "ProxyType")
_KDE_NO_PROXY_FOR_KEY = SettingKey(_KDE_GROUP, "NoProxyFor")
_KDE_TYPE_MANUAL: Final[str] = "1"
_KDE_TYPE_NONE: Final[str] = "0"


class Service(str, Enum):
    HTTP = "http"
    HTTPS = "https"
    SOCKS = "socks"


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    enabled: bool = False
    host: str = ""
    port: int = 0
    bypass: str = ""


def _gnome_host_key(service: Service) -> SettingKey:
    return SettingKey(f"{_SCHEMA_PROXY}.{service.value}", "host")


def _gnome_port_key(service: Service) -> SettingKey:
    return SettingKey(f"{_SCHEMA_PROXY}.{service.value}", "port")


def _kde_endpoint_key(service: Service) -> SettingKey:
    return SettingKey(_KDE_GROUP, f"{service.value}Proxy")


def _validate_port(port: int) -> None:
    if not 0 <= int(port) <= MAX_PORT:
        raise SysproxyError(
            f"Invalid proxy port: {port}",
            user_message="System proxy port must be between 0 and 65535.",
        )


class SystemProxyManager:
    def __init__(
        self,
        desktop: DesktopEnvironment | None = None,
        *,
        store: SettingsStore | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._signal = read_desktop_signal(environ)
        self._desktop = desktop if desktop is not None else detect(environ)
        self._store = store

    @property
    def desktop(self) -> DesktopEnvironment:
        return self._desktop

    def is_supported(self) -> bool:
        return self._desktop.is_supported

    def _ensure_store(self) -> SettingsStore:
        if not self._desktop.is_supported:
            raise NotSupportError(self._signal)
        if self._store is None:
            self._store = store_for(self._desktop)
        return self._store

    # Enable flag

    def get_enable(self) -> bool:
        store = self._ensure_store()
        if self._desktop is DesktopEnvironment.GNOME:
            return strip_quotes(store.get_scalar(_GNOME_MODE_KEY)) == _GNOME_MODE_MANUAL
        return store.get_scalar(_KDE_PROXY_TYPE_KEY) == _KDE_TYPE_MANUAL

    def set_enable(self, enabled: bool) -> None:
        store = self._ensure_store()
        if self._desktop is DesktopEnvironment.GNOME:
            mode = _GNOME_MODE_MANUAL if enabled else _GNOME_MODE_NONE
            store.set_scalar(_GNOME_MODE_KEY, format_gsettings_str(mode))
        else:
            store.set_scalar(_KDE_PROXY_TYPE_KEY, _KDE_TYPE_MANUAL if enabled else _KDE_TYPE_NONE)
        logger.info("System proxy %s on %s", "enabled" if enabled else "disabled", self._desktop.value)

    # Bypass list

    def get_bypass(self) -> str:
        store = self._ensure_store()
        if self._desktop is DesktopEnvironment.GNOME:
            raw = store.get_scalar(_GNOME_IGNORE_HOSTS_KEY)
        else:
            raw = store.get_scalar(_KDE_NO_PROXY_FOR_KEY)
        return parse_bypass_list(raw)

    def set_bypass(self, bypass: str) -> None:
        store = self._ensure_store()
        if self._desktop is DesktopEnvironment.GNOME:
            store.set_scalar(_GNOME_IGNORE_HOSTS_KEY, format_bypass_list(bypass, bracketed=True))
        else:
            store.set_scalar(_KDE_NO_PROXY_FOR_KEY, format_bypass_list(bypass, bracketed=False))

    # Per-service endpoints

    def get_proxy(self, service: Service) -> ProxyConfig:
        store = self._ensure_store()
        service = Service(service)
        if self._desktop is DesktopEnvironment.GNOME:
            host = strip_quotes(store.get_scalar(_gnome_host_key(service)))
            port = parse_port(store.get_scalar(_gnome_port_key(service)))
        else:
            key = _kde_endpoint_key(service)
            host, port = parse_kde_endpoint(store.get_scalar(key), field=key.name)
        return ProxyConfig(enabled=False, host=host, port=port, bypass="")

    def set_proxy(self, service: Service, host: str, port: int) -> None:
        store = self._ensure_store()
        service = Service(service)
        _validate_port(port)
        if self._desktop is DesktopEnvironment.GNOME:
            store.set_scalar(_gnome_host_key(service), format_gsettings_str(host))
            store.set_scalar(_gnome_port_key(service), str(int(port)))
        else:
            store.set_scalar(
                _kde_endpoint_key(service),
                format_kde_endpoint(service.value, host, int(port)),
            )
        logger.info("Set %s proxy to %s:%s", service.value, host, port)

    def get_http(self) -> ProxyConfig:
        return self.get_proxy(Service.HTTP)

    def get_https(self) -> ProxyConfig:
        return self.get_proxy(Service.HTTPS)

    def get_socks(self) -> ProxyConfig:
        return self.get_proxy(Service.SOCKS)

    def set_http(self, cfg: ProxyConfig) -> None:
        self.set_proxy(Service.HTTP, cfg.host, cfg.port)

    def set_https(self, cfg: ProxyConfig) -> None:
        self.set_proxy(Service.HTTPS, cfg.host, cfg.port)

    def set_socks(self, cfg: ProxyConfig) -> None:
        self.set_proxy(Service.SOCKS, cfg.host, cfg.port)

    # Combined configuration

    def get_system_proxy(self) -> ProxyConfig:
        """Read the whole configuration as a single endpoint.

        The SOCKS endpoint is reported unless its host is empty, in which case
        HTTP is used, and HTTPS replaces HTTP when both are set.
        """
        self._ensure_store()
        enabled = self.get_enable()

        socks = self.get_socks()
        https = self.get_https()
        http = self.get_http()

        if not socks.host:
            if http.host:
                socks = replace(socks, host=http.host, port=http.port)
            if https.host:
                socks = replace(socks, host=https.host, port=https.port)

        try:
            bypass = self.get_bypass()
        except SysproxyError:
            logger.warning("Failed to read proxy bypass list; using empty list", exc_info=True)
            bypass = ""

        cfg = replace(socks, enabled=enabled, bypass=bypass)
        logger.info(
            "System proxy: desktop=%s enabled=%s endpoint=%s:%s bypass=%r",
            self._desktop.value,
            cfg.enabled,
            cfg.host,
            cfg.port,
            cfg.bypass,
        )
        return cfg

    def set_system_proxy(self, cfg: ProxyConfig) -> None:
        """Write the enable flag, then (only when enabling) SOCKS, HTTPS, HTTP and bypass.

        Stops at the first failure; earlier writes are not rolled back.
        """
        self._ensure_store()
        if cfg.enabled:
            _validate_port(cfg.port)

        self.set_enable(cfg.enabled)
        if not cfg.enabled:
            return

        self.set_socks(cfg)
        self.set_https(cfg)
        self.set_http(cfg)
        self.set_bypass(cfg.bypass)


def get_system_proxy(environ: Mapping[str, str] | None = None) -> ProxyConfig:
    return SystemProxyManager(environ=environ).get_system_proxy()


def set_system_proxy(cfg: ProxyConfig, environ: Mapping[str, str] | None = None) -> None:
    SystemProxyManager(environ=environ).set_system_proxy(cfg)
