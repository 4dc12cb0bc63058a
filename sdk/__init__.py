"""sdk - Software Development Kit for telemetry services

Contains reusable modules for:
    - transport: Publish/subscribe transport (MQTT, NATS)
    - logging: Centralized structured logging
    - jsonWriter: Low-level JSON text writer
"""

__version__ = "1.0-beta"
