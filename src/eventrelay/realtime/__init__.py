"""Real-time infrastructure — in-process fan-out + WebSocket sessions.

Learn: Events flow in one direction:
1. Producer → POST /broadcast → FanoutBus.publish()
2. FanoutBus → each ConnectionSession's subscription → its WebSocket

The bus and the connection registry are created once per process (in
the app lifespan) and handed to handlers through FastAPI dependencies.
"""
