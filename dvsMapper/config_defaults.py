"""Built-in mapper configuration, used as the base every config file is merged over."""

DEFAULT_MAPPER_CONFIG = {
    "_comment_transport": "uri scheme selects the adapter: mqtt://host:port or nats://host:port",
    "_comment_mapper": "inputTopic is a '/'-separated filter; addTimestamp adds a UTC 'time' entry to every document.",
    "configVersion": "1.0",
    "transport": {
        "uri": "mqtt://localhost:1883",
        "clientId": None
    },
    "mapper": {
        "inputTopic": "dvs/+/+/+",
        "outputTopic": "tedge/measurements",
        "addTimestamp": True
    },
    "logging": {
        "logDir": None,
        "level": "INFO",
        "console": True,
        "utc": True
    }
}
