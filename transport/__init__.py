"""Gateway transports: Fonnte (WhatsApp) and Tokopay (payments)."""
