class CacheException(Exception):
    """Base for all credential cache failures"""

    pass


class CacheWriteException(CacheException):
    def __init__(self, path: str, reason: Exception):
        self.path: str = path
        self.reason: Exception = reason

        super().__init__(f"Could not write credential cache {path}: {reason}")
