from .factory import MessageQueueFactory, split_redis_url
from .redis_queue import RedisStreamQueue
from .sqs_queue import SqsQueue

__all__ = [
    "MessageQueueFactory",
    "RedisStreamQueue",
    "SqsQueue",
    "split_redis_url",
]
