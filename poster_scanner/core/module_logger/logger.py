import logging

from pathlib import Path

class ModuleLogger:
    """
    Configures and manages logging for Poster Scanner modules.
    """
    LOGS_DIR = Path(__file__).resolve().parents[2] / 'logs'

    def __init__(self, module_name: str, level: int = logging.INFO):
        """
        Initialize logger configuration for a specific module.

        Args:
            module_name : Name of the module requesting the logger
            level       : Logging level applied when the logger is first configured
        """
        self.logger   = logging.getLogger(f'poster_scanner.{module_name}')
        self.log_file = self.LOGS_DIR / f'{module_name}.log'
        self.level    = level

        self.configure_logger()

    def configure_logger(self):
        """
        Sets up logger with file handler if not already configured.
        """
        if not self.logger.handlers:

            self.logger.setLevel(self.level)
            self.LOGS_DIR.mkdir(parents = True, exist_ok = True)

            handler = logging.FileHandler(self.log_file, mode = 'a', encoding = 'utf-8')
            handler.setFormatter(
                logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
            )

            self.logger.addHandler(handler)
            self.logger.propagate = False

    def __call__(self) -> logging.Logger:
        """
        Returns the configured logger instance.
        """
        return self.logger
