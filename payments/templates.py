"""
Outbound message templates (Indonesian).

Formatting only. Amounts render as "Rp 10.000", timestamps in WIB.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from transport.tokopay.schemas import PaymentCallback, PaymentOrder

WIB = timezone(timedelta(hours=7), "WIB")

_MONTHS_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def format_rupiah(amount: Optional[int]) -> str:
    """10000 -> 'Rp 10.000'"""
    if amount is None:
        return "Rp -"
    return "Rp " + f"{amount:,}".replace(",", ".")


def format_paid_at(value: str) -> str:
    """
    Render a gateway timestamp as '18 Oktober 2026 14.05' in WIB.

    Naive timestamps are taken as WIB already. Unparseable input is
    returned unchanged.
    """
    if not value:
        return "-"
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return value

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=WIB)
    local = parsed.astimezone(WIB)
    return f"{local.day} {_MONTHS_ID[local.month - 1]} {local.year} {local:%H.%M}"


# ============================================================================
# PAYMENT STATUS NOTIFICATIONS
# ============================================================================

def payment_success(callback: PaymentCallback) -> str:
    return (
        "🎉 *Pembayaran Berhasil!*\n\n"
        "✅ Terima kasih sudah melakukan pembayaran\n"
        f"💰 Jumlah: {format_rupiah(callback.amount)}\n"
        f"🔗 ID Transaksi: {callback.reference_id}\n"
        f"⏰ Dibayar: {format_paid_at(callback.paid_at)}\n\n"
        "📦 *Status Pesanan:*\n"
        "🔄 Sedang diproses...\n\n"
        "Kami akan segera memproses pesanan kamu. Terima kasih sudah berbelanja! 😊"
    )


def order_processing() -> str:
    return (
        "📦 *Update Pesanan*\n\n"
        "🔄 Pesanan kamu sedang dalam proses pengemasan...\n"
        "⏱️ Estimasi selesai: 10-15 menit\n\n"
        "Harap tunggu ya! 😊"
    )


def order_completed() -> str:
    return (
        "✅ *Pesanan Selesai!*\n\n"
        "🎊 Yeay! Pesanan kamu sudah selesai diproses\n"
        "📦 Status: Siap untuk diambil/dikirim\n"
        "🚀 Terima kasih sudah berbelanja dengan kami!\n\n"
        "Semoga puas dengan pelayanan kami! 🙏"
    )


def payment_failed(callback: PaymentCallback) -> str:
    return (
        "❌ *Pembayaran Gagal*\n\n"
        "Maaf, pembayaran kamu gagal diproses.\n"
        f"💰 Jumlah: {format_rupiah(callback.amount)}\n"
        f"🔗 ID Transaksi: {callback.reference_id}\n\n"
        "Silakan coba lagi atau hubungi customer service jika butuh bantuan.\n"
        'Ketik "bayar" untuk mencoba pembayaran lagi.'
    )


def payment_pending(callback: PaymentCallback) -> str:
    return (
        "⏳ *Menunggu Pembayaran*\n\n"
        "Pembayaran kamu sedang diproses...\n"
        f"💰 Jumlah: {format_rupiah(callback.amount)}\n"
        f"🔗 ID Transaksi: {callback.reference_id}\n\n"
        "Harap tunggu sebentar ya! 🙏"
    )


# ============================================================================
# PAYMENT INTENT REPLIES
# ============================================================================

def payment_link(
    order: PaymentOrder,
    default_pay_url: str,
    default_qr_note: str,
) -> str:
    qr_line = f"📱 QR Code: {order.qr_link}" if order.qr_link else f"📱 {default_qr_note}"
    received = (
        f"\n🏦 Diterima merchant: {format_rupiah(order.received_amount)}"
        if order.received_amount is not None
        else ""
    )
    return (
        "💳 *Tagihan Pembayaran*\n\n"
        f"💰 Total bayar: {format_rupiah(order.amount)}{received}\n"
        f"🏷️ Metode: {order.channel}\n"
        f"🔗 ID Transaksi: {order.reference_id}\n\n"
        f"👉 Bayar di sini: {order.pay_url or default_pay_url}\n"
        f"{qr_line}\n\n"
        "Kami akan kabari kamu begitu pembayaran diterima. 🙏"
    )


def payment_unavailable() -> str:
    return (
        "😔 Maaf, sistem pembayaran sedang bermasalah.\n"
        'Silakan coba lagi beberapa saat lagi dengan mengetik "bayar".'
    )


# ============================================================================
# CHAT REPLIES
# ============================================================================

def greeting(name: str) -> str:
    return f"Halo {name}! 👋 Gimana kabarnya?"


def help_menu() -> str:
    return (
        "Aku bisa bantu kamu dengan:\n"
        "• Info produk\n"
        "• Pembayaran (ketik \"bayar\")\n"
        "• Customer service\n"
        "• Pertanyaan umum\n\n"
        "Ketik aja yang kamu butuhin!"
    )


def product_list() -> str:
    return (
        "📦 Produk kami:\n"
        "• Produk A - Rp 100.000\n"
        "• Produk B - Rp 150.000\n"
        "• Produk C - Rp 200.000\n\n"
        "Mau tau lebih detail yang mana?"
    )


def fallback(message: str) -> str:
    return (
        f'Terima kasih pesannya: "{message}"\n\n'
        "Aku sedang belajar jadi maaf kalo belum bisa jawab dengan baik. "
        'Coba ketik "help" untuk bantuan! 🤖'
    )
