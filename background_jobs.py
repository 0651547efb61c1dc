import threading


def start_daemon_thread(target, args=(), kwargs=None, name=None):
    """Start a daemon thread with a consistent helper API."""
    thread = threading.Thread(target=target, args=args, kwargs=kwargs or {}, name=name, daemon=True)
    thread.start()
    return thread


def start_app_context_job(app, target, args=(), kwargs=None, on_error=None):
    """
    Run a callable in a daemon thread inside the provided Flask app context.

    Failures go to `on_error` when given, otherwise to the app logger.
    """

    def _run():
        with app.app_context():
            try:
                target(*args, **(kwargs or {}))
            except Exception as exc:
                if on_error:
                    on_error(exc)
                else:
                    app.logger.error(f"Background job {getattr(target, '__name__', target)} failed: {exc}")

    return start_daemon_thread(_run, name=f"job-{getattr(target, '__name__', 'anonymous')}")
