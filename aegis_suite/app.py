from .logging_setup import configure_logging


def launch_app():
    configure_logging()
    from .ui.main_window import launch_app as _launch
    _launch()


if __name__ == "__main__":
    launch_app()
