from .component import Crashlytics

__all__ = ["Crashlytics"]
