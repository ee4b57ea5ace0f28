from importlib import import_module

__all__ = [
    "kaspa_api_client",
    "KaspaApiClient",
    "KaspaWalletScheduler",
    "SchedulerTimer",
    "QueueMessageChannel",
]

_LAZY_EXPORTS = {
    "kaspa_api_client": ("services.kaspa.api_client", "kaspa_api_client"),
    "KaspaApiClient": ("services.kaspa.api_client", "KaspaApiClient"),
    "KaspaWalletScheduler": ("services.kaspa.wallet_scheduler", "KaspaWalletScheduler"),
    "SchedulerTimer": ("services.scheduler", "SchedulerTimer"),
    "QueueMessageChannel": ("services.scheduler", "QueueMessageChannel"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module 'services' has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
