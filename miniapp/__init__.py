"""English-learning Telegram Mini App backend."""
