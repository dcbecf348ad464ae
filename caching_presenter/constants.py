"""Constants for caching presenters."""

# Naming convention marking an operation as a mutator: "name=".
MUTATOR_SUFFIX = "="

# Operation name used for item assignment (presenter[key] = value).
ITEM_ASSIGNMENT = "[]="

# Keyword that carries a callback ("block") on a presenter call
DEFAULT_CALLBACK_KEYWORD = "block"

# Environment variable prefix for PresenterSettings
ENV_PREFIX = "CACHING_PRESENTER_"

# Registry naming convention: <DelegateClass>Presenter
PRESENTER_CLASS_SUFFIX = "Presenter"

# Standard library logger that presenter events are routed to
LOGGER_NAME = "caching_presenter"
