from typing import Optional

from coach_api.schemas import AnalysisResult


def _rating(analysis: AnalysisResult, metric: str) -> int:
    return analysis.ratings.get(metric) or 75


def analysis_context(analysis: Optional[AnalysisResult]) -> str:
    """One-sentence description of an analysis for the model's system prompt."""
    if analysis is None:
        return ""
    return (
        "Based on the latest voice analysis: "
        f"tone: {analysis.tone} ({_rating(analysis, 'tone')}/100), "
        f"speed: {analysis.speed} ({_rating(analysis, 'speed')}/100), "
        f"clarity: {analysis.clarity} ({_rating(analysis, 'clarity')}/100), "
        f"volume: {analysis.volume} ({_rating(analysis, 'volume')}/100), "
        f"pauses: {analysis.pauses} ({_rating(analysis, 'pauses')}/100), "
        f"modulation: {analysis.modulation} ({_rating(analysis, 'modulation')}/100), "
        f"confidence score: {analysis.confidence_score}/100."
    )


def analysis_summary_message(analysis: AnalysisResult) -> str:
    """Assistant turn recorded in the conversation after each analysis."""
    summary = (
        "Your latest voice analysis shows: "
        f"Tone: {analysis.tone} ({_rating(analysis, 'tone')}/100), "
        f"Speed: {analysis.speed} ({_rating(analysis, 'speed')}/100), "
        f"Clarity: {analysis.clarity} ({_rating(analysis, 'clarity')}/100), "
        f"Volume: {analysis.volume} ({_rating(analysis, 'volume')}/100), "
        f"Pauses: {analysis.pauses} ({_rating(analysis, 'pauses')}/100), "
        f"Modulation: {analysis.modulation} ({_rating(analysis, 'modulation')}/100). "
        f"Overall Confidence: {analysis.confidence_score}/100."
    )
    suggestions = f"Suggestions: {' '.join(analysis.suggestions)}" if analysis.suggestions else ""
    return (
        f"Great! I've analyzed your recording. {summary} {suggestions} "
        "Feel free to ask me specific questions about improving these areas!"
    )


def _system_prompt_base() -> str:
    return (
        "You are an expert public speaking mentor and coach with years of experience. Your role is to provide "
        "highly specific, actionable, and personalized advice based on the user's actual voice analysis results."
    )


def _system_prompt_instructions() -> str:
    return (
        "INSTRUCTIONS:\n"
        "1. Always reference the user's actual analysis data when available\n"
        "2. Give SPECIFIC, actionable tips (3-5 concrete steps) - NOT generic advice\n"
        "3. Be encouraging but honest about areas needing improvement\n"
        "4. Provide practical exercises or techniques they can practice immediately\n"
        "5. If asked about a specific area (clarity, modulation, pauses, etc.), give detailed, relevant advice "
        "for THAT specific topic\n"
        "6. Never give generic \"practice regularly\" responses - always be specific\n"
        "7. Format responses with clear, numbered steps when giving improvement advice\n"
        "8. Match your response tone to the question - if they ask about clarity, focus ONLY on clarity techniques\n\n"
        "EXAMPLES:\n"
        "- If user asks \"how to improve clarity\" → Give 5-6 specific clarity techniques: tongue twisters, "
        "enunciation exercises, slowing down specific sounds, consonant practice, etc.\n"
        "- If user asks about modulation → Give specific pitch variation exercises, inflection techniques, "
        "voice dynamics practice\n"
        "- Always relate back to their actual scores when possible\n\n"
        "Be warm, mentor-like, and supportive. Responses should be 4-8 sentences for detailed questions, "
        "2-3 for simple confirmations."
    )


def build_system_prompt(analysis: Optional[AnalysisResult]) -> str:
    parts = [_system_prompt_base()]
    context = analysis_context(analysis)
    if context:
        parts.append(
            "IMPORTANT - User's Latest Voice Analysis Results:\n"
            f"{context}\n\n"
            "Use this specific data to give personalized advice. Reference their actual scores and ratings "
            "when providing tips."
        )
    parts.append(_system_prompt_instructions())
    return "\n\n".join(parts)
