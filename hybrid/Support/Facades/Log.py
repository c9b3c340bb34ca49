from __future__ import annotations

from .Facade import Facade


class LogFacade(Facade):
    """
    Static access to the `log` service.

    `log` is provided by the deferred `LogServiceProvider`, so the first call
    through this facade registers that provider and builds the `LogManager`:

        Log.info('Order shipped', {'order': order_id})
        Log.channel('stderr').warning('Queue is backing up')
    """

    @staticmethod
    def get_facade_accessor() -> str:
        return 'log'


Log = LogFacade()
