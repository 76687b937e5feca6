import json
import logging
import datetime

from news_api.config.settings import settings


class StructuredLogger:

    def __init__(self, logger_name='StructuredLogger', service=None, level='INFO'):
        self.service = service
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

        # avoid stacking handlers when the module is reloaded
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        self.logger.propagate = False


    def _log(self, level, message, exc_info=None, **kwargs):
        log_entry = {
            'timestamp': datetime.datetime.now(datetime.timezone.utc).isoformat(),
            'level': level.upper(),
            'message': message,
            **kwargs
        }
        if self.service:
            log_entry.setdefault('service', self.service)
        json_log = json.dumps(log_entry, default=str)
        getattr(self.logger, level)(json_log, exc_info=exc_info) # Invoke the method corresponding to the level


    def info(self, message, **kwargs):
        self._log('info', message, **kwargs)

    def warning(self, message, **kwargs):
        self._log('warning', message, **kwargs)

    def error(self, message, **kwargs):
        self._log('error', message, **kwargs)

    def debug(self, message, **kwargs):
        self._log('debug', message, **kwargs)

app_logger = StructuredLogger('NewsApiLogger', service=settings.SERVICE_NAME, level=settings.LOG_LEVEL)
