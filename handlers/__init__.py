"""Intent handlers: each turns an IntentContext into an IntentResponse."""
