"""The event sourced aggregate store and an event publisher mixin for aggregates."""