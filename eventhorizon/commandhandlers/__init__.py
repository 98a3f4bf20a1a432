"""Command handlers that route commands by type and dispatch them to aggregates."""