"""
DVS Mapper Entry Point

    python -m dvsMapper --config mapper-config.json
"""

from .main import main

if __name__ == '__main__':
    main()
