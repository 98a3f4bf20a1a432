"""Event handlers for sagas and for waiting on events."""