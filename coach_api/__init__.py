"""Speech coach API.

Modules:
- main: FastAPI app, routes, lifespan wiring
- store: in-memory sessions and conversation history
- analysis: pluggable voice analysis providers (random mock)
- providers: pluggable chat completion clients (OpenAI-compatible, mock)
- mentor: system prompt, canned fallback replies, responder
"""
