"""Web API Blueprint 集合"""

from mvnuploader.web.blueprints.deps_bp import deps_bp

__all__ = ["deps_bp"]
