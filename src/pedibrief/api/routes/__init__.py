"""Route modules mounted by :func:`pedibrief.api.app.create_app`."""
