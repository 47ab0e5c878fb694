"""
Fixed user-facing strings: fallbacks, failure placeholders and notices.
"""

# Agent runner
AGENT_EMPTY_OUTPUT = "Analisis tidak dihasilkan."
AGENT_FAILED_OUTPUT = "Analisis Gagal."
AGENT_FAILED_ERROR = "Gagal menganalisis"

# Synthesizer
SYNTHESIS_EMPTY_OUTPUT = "Gagal menyusun laporan sintesis."
SYNTHESIS_FAILED_OUTPUT = "Gagal menyusun laporan akhir."

# Dialogue session
CHAT_WELCOME = (
    "Selamat datang. Saya adalah **Profesor Akuntansi** dan Penguji Disertasi Anda. "
    "Silakan unggah proposal Anda untuk diperiksa, atau ajukan pertanyaan akademik secara langsung."
)
CHAT_CONTEXT_LOADED = (
    "*Laporan pemeriksaan telah dimuat ke dalam memori. Anda sekarang dapat berdiskusi "
    "secara mendalam mengenai poin-poin kritik yang dihasilkan.*"
)
CHAT_EMPTY_RESPONSE = "Mohon maaf, saya tidak dapat menghasilkan respons saat ini."
CHAT_SEND_FAILED = "Maaf, terjadi kesalahan saat memproses permintaan Anda. Silakan coba lagi."
CHAT_BUSY = "Profesor sedang meninjau referensi... Mohon tunggu hingga jawaban sebelumnya selesai."
CHAT_EMPTY_MESSAGE = "Pesan kosong tidak dapat dikirim."

# Document ingestion
DOCUMENT_NOT_PDF = "Mohon unggah file PDF."
DOCUMENT_EMPTY = "File yang diunggah kosong."
DOCUMENT_TOO_LARGE = "Ukuran file melebihi batas {limit_mb:g} MB."
DOCUMENT_UNREADABLE = "File tidak dapat dibaca."
DOCUMENT_REQUIRED = "Unggah proposal dan jalankan analisis untuk melihat laporan."

# Analysis status labels
STATUS_LABELS = {
    "IDLE": "Menunggu",
    "RUNNING": "Sedang Menganalisis...",
    "COMPLETED": "Selesai",
    "FAILED": "Gagal",
}
ANALYSIS_IN_PROGRESS = "Analisis sedang berjalan. Mohon tunggu hingga semua agen selesai."
REPORT_NOT_AVAILABLE = "Laporan belum tersedia."

# Export
EXPORT_FILENAME_TEMPLATE = "Laporan_Kritik_{name}.md"
EXPORT_DEFAULT_NAME = "Proposal"
EXPORT_CONTENT_TYPE = "text/markdown"

# Surface status
SYNTHESIZING = "Penguji Utama sedang menyusun laporan..."
REPORT_AVAILABLE = "Laporan Pemeriksaan Akhir tersedia"
CHAT_CONTEXT_ACTIVE = "Konteks Laporan Aktif"
