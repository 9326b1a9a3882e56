"""
Main entry point for the analog watch face
"""
import sys
import signal
from pathlib import Path

from watchface import __version__
from watchface.core.clock_service import ClockService
from watchface.core.config_service import config
from watchface.core.engine import WatchFaceEngine
from watchface.core.errors import AssetError
from watchface.core.events import EventQueue
from watchface.core.logging_service import get_logger
from watchface.hardware.battery import BatteryMonitor
from watchface.hardware.timezone_watcher import TimezoneWatcher
from watchface.ui.assets import AssetScaler, FileAssetSource, GeneratedAssetSource
from watchface.ui.compositor import FrameCompositor
from watchface.ui.main_window import MainWindow


class Application:
    """
    Main application orchestrator.
    """

    def __init__(self):
        """Initialize application"""
        config.reload()

        self._logger = get_logger(
            'watchface',
            config.get('logging.level', 'INFO'),
            config.get('logging.file', ''),
        )
        self._logger.log_startup(__version__, self._get_config_summary())

        self._clock_service = None
        self._battery = None
        self._timezone_watcher = None
        self._event_queue = EventQueue()
        self._main_window = None
        self._stopped = False

    def _get_config_summary(self) -> dict:
        """Get configuration summary for logging"""
        return {
            'timezone': config.get('timezone', ''),
            'display': {
                'width': config.get('display.width', 454),
                'height': config.get('display.height', 454),
                'fullscreen': config.get('display.fullscreen', False),
            },
            'hand_style': config.get('face.hand_style', 'bitmap'),
        }

    def _initialize_services(self) -> None:
        """Initialize clock, battery and timezone watcher"""
        self._logger.info("Initializing services")

        self._clock_service = ClockService(config.get('timezone', ''))
        self._logger.info(f"Clock service initialized: timezone={self._clock_service.timezone}")

        self._battery = BatteryMonitor(config.get('battery.path', ''))
        level = self._battery.level()
        if level is None:
            self._logger.info("No battery found, battery overlay hidden")
        else:
            self._logger.info(f"Battery monitor initialized: {level}%")

        if self._clock_service.follows_system:
            poll_seconds = config.get('timezone_watch.poll_seconds', 5)
            self._timezone_watcher = TimezoneWatcher(poll_seconds=poll_seconds)
            self._logger.info(f"Timezone watcher enabled: every {poll_seconds}s")
        else:
            self._logger.info("Fixed timezone configured, timezone watcher disabled")

    def _create_asset_source(self):
        """File assets if a directory is configured, generated ones otherwise"""
        directory = config.get('assets.directory', '')
        if not directory:
            self._logger.info("No asset directory configured, using generated face")
            return GeneratedAssetSource()

        filenames = {
            name: config.get(f'assets.{name}')
            for name in ('background', 'hour_hand', 'minute_hand', 'second_hand')
        }
        self._logger.info(f"Loading face assets from {Path(directory).resolve()}")
        return FileAssetSource(Path(directory), filenames)

    def _build_engine(self, timer_host, sink, tap_notifier) -> WatchFaceEngine:
        """Engine factory handed to the main window"""
        scaler = AssetScaler(config.get('assets.hand_scale_mode', 'scaled_background'))
        compositor = FrameCompositor(
            hand_style=config.get('face.hand_style', 'bitmap'),
            low_bit_ambient=config.get('ambient.low_bit', True),
            overlay_font_size=config.get('face.overlay_font_size', 20),
            overlay_color=config.get('face.overlay_color', '#ffffff'),
        )
        return WatchFaceEngine(
            clock=self._clock_service,
            asset_source=self._create_asset_source(),
            sink=sink,
            timer_host=timer_host,
            scaler=scaler,
            compositor=compositor,
            battery=self._battery,
            calendar=self._clock_service,
            timezone_notifier=self._timezone_watcher,
            tap_notifier=tap_notifier,
            tap_message=config.get('tap.message', 'Analog watch face'),
            event_queue=self._event_queue,
            interval_ms=config.get('scheduler.interactive_update_ms', 1000),
        )

    def _initialize_ui(self) -> None:
        """Initialize UI window"""
        self._logger.info("Initializing UI")

        self._main_window = MainWindow(
            engine_factory=self._build_engine,
            logger=self._logger,
            width=config.get('display.width', 454),
            height=config.get('display.height', 454),
            fullscreen=config.get('display.fullscreen', False),
            ambient_timeout=config.get('power.ambient_timeout_seconds', 30),
            time_tick_seconds=config.get('power.time_tick_seconds', 60),
        )

        self._main_window.initialize()
        self._logger.info("UI initialized successfully")

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self._logger.info(f"Received signal {signum}, shutting down")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self) -> None:
        """Run the application"""
        try:
            self._setup_signal_handlers()
            self._initialize_services()
            self._initialize_ui()

            self._logger.info("Application started successfully")

            # Start UI event loop (blocking)
            self._main_window.start()

        except KeyboardInterrupt:
            self._logger.info("Keyboard interrupt received")
        except AssetError as e:
            self._logger.critical(f"Cannot start without face assets: {e}")
            raise
        except Exception as e:
            self._logger.critical(f"Fatal error: {e}", exc_info=True)
            raise
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Cleanup and shutdown"""
        if self._stopped:
            return
        self._stopped = True
        self._logger.info("Shutting down application")

        if self._main_window and self._main_window.is_running():
            self._main_window.stop()

        engine = self._main_window.engine if self._main_window else None
        if engine is not None:
            self._logger.log_frame_stats(engine.frames_drawn, engine.frames_skipped)

        if self._timezone_watcher:
            self._timezone_watcher.unsubscribe()

        self._logger.log_shutdown()


def main():
    """Main entry point"""
    app = Application()
    try:
        app.run()
    except AssetError:
        sys.exit(1)


if __name__ == '__main__':
    main()
