class MiningError(Exception):
    "base class of all errors raised by the mining jobs"
    pass


class PersistenceError(MiningError):
    """
    a helper file or record file could not be read or written.
    args keep (path,reason) so the error survives pickling out of a worker process
    """

    def __init__(self,path,reason):
        self.path=path
        self.reason=reason
        super(PersistenceError,self).__init__(path,reason)

    def __str__(self):
        return "{}: {}".format(self.path,self.reason)


class ConfigurationError(MiningError):
    "an invalid configuration value"
    pass
