"""
Autumn Moderation Bot - Utils Package
=====================================

Stateless helpers shared by the database, services and cogs.

Available Utilities:
    async_utils: Concurrent best-effort operations with failure logging
    cache: Config cache over memory / Redis stores
    discord_errors: Classified logging for Discord HTTP failures
    duration: Compact duration parsing and formatting
    embeds: Case log, DM and reply embeds
    formatting: Case labels and display names

Modules are imported directly (``from autumn.utils.cache import ...``);
this package re-exports nothing so the database layer can depend on it
without import cycles.
"""
