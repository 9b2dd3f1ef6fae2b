from jenkinsfn.apt.providers.base import TypeMetadataProvider
from jenkinsfn.apt.providers.runtime import RuntimeProvider
from jenkinsfn.apt.providers.source import SourceProvider

__all__ = ["TypeMetadataProvider", "RuntimeProvider", "SourceProvider"]
