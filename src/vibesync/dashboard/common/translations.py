"""
UI strings for the dashboard in English and Spanish.
"""

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "nav_listen": "Listen",
        "nav_stats": "Vibe Stats",
        "nav_history": "History",
        "nav_notes": "Notes",
        "ai_assistant": "AI Assistant",
        "title_analyzer": "Sonic Analyzer",
        "title_dashboard": "Vibe Intelligence",
        "title_history": "Sonic Archives",
        "title_notes": "Session Notes",
        "desc_analyzer": "Capture audio to decompose rhythm, flow, and context.",
        "desc_dashboard": "Visualizing your musical journey and patterns.",
        "desc_history": "All your previous analyses in one place.",
        "desc_notes": "Your thoughts on tracks, production, and vibes.",
        "system_ok": "System Operational",
        "input_source": "Input Source",
        "status_recording": "RECORDING LIVE",
        "status_ready": "READY",
        "btn_analyze": "Analyzing Vibe...",
        "btn_start": "Start Listening",
        "btn_stop": "Stop & Analyze",
        "label_bpm": "BPM Est.",
        "label_fingerprint": "Sonic Fingerprint",
        "label_vibe_analysis": "Vibe Analysis",
        "label_matches": "Vibe Matches",
        "empty_analysis": "Record audio to generate deep-learning vibe recommendations.",
        "match_score": "Match",
        "btn_add_note": "Add Note",
        "btn_listen_yt": "Listen on YouTube",
        "no_data": "No data collected yet.",
        "no_data_sub": "Start analyzing music to build your dashboard.",
        "top_genres": "Top Detected Genres",
        "mood_spectrum": "Mood Spectrum",
        "stat_scans": "Total Scans",
        "stat_latest": "Latest Vibe",
        "stat_freq_mood": "Top Mood",
        "no_history": "No history found.",
        "note_new": "New Note",
        "note_placeholder": "Write your thoughts about a vibe, style, or track...",
        "note_save": "Save Note",
        "note_empty": "No notes yet. Capture your ideas!",
        "chat_placeholder": "Ask about genres, tempo...",
        "chat_intro": "Hey! I'm VibeBot. Record some music and I'll help you find similar tracks!",
        "chat_error": "Sorry, I spaced out. Try again?",
        "chat_title": "Vibe Assistant",
    },
    "es": {
        "nav_listen": "Escuchar",
        "nav_stats": "Estadísticas",
        "nav_history": "Historial",
        "nav_notes": "Notas",
        "ai_assistant": "Asistente IA",
        "title_analyzer": "Analizador Sónico",
        "title_dashboard": "Inteligencia Vibe",
        "title_history": "Archivos Sónicos",
        "title_notes": "Notas de Sesión",
        "desc_analyzer": "Captura audio para descomponer ritmo, flow y contexto.",
        "desc_dashboard": "Visualizando tu viaje musical y patrones.",
        "desc_history": "Todos tus análisis anteriores en un solo lugar.",
        "desc_notes": "Tus pensamientos sobre pistas, producción y vibras.",
        "system_ok": "Sistema Operativo",
        "input_source": "Fuente de Audio",
        "status_recording": "GRABANDO EN VIVO",
        "status_ready": "LISTO",
        "btn_analyze": "Analizando Vibe...",
        "btn_start": "Escuchar Ahora",
        "btn_stop": "Parar y Analizar",
        "label_bpm": "BPM Est.",
        "label_fingerprint": "Huella Sonora",
        "label_vibe_analysis": "Análisis de Vibe",
        "label_matches": "Coincidencias",
        "empty_analysis": "Graba audio para generar recomendaciones profundas.",
        "match_score": "Coincidencia",
        "btn_add_note": "Añadir Nota",
        "btn_listen_yt": "Escuchar en YouTube",
        "no_data": "Sin datos recolectados.",
        "no_data_sub": "Empieza a analizar música para construir tu tablero.",
        "top_genres": "Géneros Detectados Top",
        "mood_spectrum": "Espectro Emocional",
        "stat_scans": "Escaneos Totales",
        "stat_latest": "Último Vibe",
        "stat_freq_mood": "Mood Top",
        "no_history": "No se encontró historial.",
        "note_new": "Nueva Nota",
        "note_placeholder": "Escribe tus ideas sobre un estilo, vibra o pista...",
        "note_save": "Guardar Nota",
        "note_empty": "Sin notas aún. ¡Captura tus ideas!",
        "chat_placeholder": "Pregunta sobre géneros, tempo...",
        "chat_intro": "¡Hola! Soy VibeBot. Graba música y te ayudaré a encontrar pistas similares.",
        "chat_error": "¿Perdón? Me distraje. ¿Intentamos de nuevo?",
        "chat_title": "Asistente Vibe",
    },
}

LANGUAGE_NAMES = {"en": "English", "es": "Español"}


def translate(language: str, key: str) -> str:
    """Look up a UI string, falling back to English and then to the key."""
    table = TRANSLATIONS.get(language, TRANSLATIONS["en"])
    return table.get(key, TRANSLATIONS["en"].get(key, key))


def toggle_language(language: str) -> str:
    return "en" if language == "es" else "es"
