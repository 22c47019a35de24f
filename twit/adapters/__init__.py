"""Queue, notification topic and Redis cache adapters."""