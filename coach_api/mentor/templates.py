"""Canned mentor replies used when the language model is not available.

`compose_fallback` is a pure function of the user's message and the session's
latest analysis. The same templates serve both the no-credentials mode and the
path taken after an upstream failure; only the closing note of the general
reply mentions which of the two happened.
"""

from typing import Optional, Sequence, Tuple

from coach_api.schemas import AnalysisResult


REASON_NO_CREDENTIALS = "no_credentials"
REASON_PROVIDER_ERROR = "provider_error"

# Checked in order; the first topic with a matching keyword wins
TOPIC_KEYWORDS: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("modulation", ("modulation", "voice variation", "pitch")),
    ("pauses", ("pause", "pausing")),
    ("volume", ("volume", "loud", "quiet", "soft")),
    ("tone", ("tone", "confident", "nervous", "calm")),
    ("speed", ("speed", "fast", "slow", "pace", "rate")),
    ("clarity", ("clarity", "clear", "pronunciation", "enunciation")),
)

DEFAULT_RATING = 75


def detect_topic(message: str) -> Optional[str]:
    lowered = (message or "").lower()
    for topic, keywords in TOPIC_KEYWORDS:
        if any(k in lowered for k in keywords):
            return topic
    return None


def _modulation(analysis: Optional[AnalysisResult]) -> str:
    current = analysis.modulation if analysis else "needs-improvement"
    text = f'Great question about voice modulation! Based on your latest recording, your modulation is currently "{current}". '
    if current in ("monotone", "needs-improvement"):
        return text + (
            "Here's how to improve: 1) Vary your pitch when emphasizing key points - raise it for excitement, "
            "lower it for authority. 2) Use inflection to show emotion and engagement. 3) Practice reading aloud "
            "with exaggerated expression first, then tone it down. 4) Record yourself and listen - notice where "
            "your voice stays flat. 5) Try practicing with children's stories which naturally require expression. "
            '6) Practice the "emotional scale" - say one sentence with 5 different emotions (happy, sad, angry, '
            "excited, calm)."
        )
    return text + (
        "You're doing well! To maintain excellent modulation: Continue varying your pitch and pace. "
        "Use pauses strategically before important points. Match your voice tone to your message's emotion."
    )


def _pauses(analysis: Optional[AnalysisResult]) -> str:
    current = analysis.pauses if analysis else "adequate"
    text = f'Excellent question about pauses! Your current pause quality is "{current}". '
    if current in ("too-few", "adequate"):
        return text + (
            "To improve: 1) Add strategic pauses after key points (2-3 seconds) to let information sink in. "
            "2) Pause before important statements for emphasis. 3) Use pauses to replace filler words like "
            '"um" and "uh". 4) Count "one-Mississippi, two-Mississippi" silently to ensure pauses are long '
            "enough. 5) Practice reading with intentional pauses - mark them in your script if needed."
        )
    return text + (
        "Great work! You're using pauses effectively. Remember: Don't overuse them - balance is key. "
        "Vary pause length based on importance of the point being made."
    )


def _volume(analysis: Optional[AnalysisResult]) -> str:
    current = analysis.volume if analysis else "good"
    text = f'Good question about volume! Your current volume level is "{current.replace("-", " ", 1)}". '
    if current == "too-quiet":
        return text + (
            "To improve: 1) Practice projecting from your diaphragm, not your throat. 2) Stand tall with good "
            "posture - it naturally increases volume. 3) Practice speaking to the back of the room. 4) Record "
            "yourself in different spaces to find optimal volume. 5) Ask a friend to sit at the back and signal "
            "if you need to speak louder."
        )
    if current == "too-loud":
        return text + (
            "To moderate: 1) Be aware of your audience's comfort - if they lean back, you're too loud. "
            "2) Practice speaking softer while maintaining clarity. 3) Use a microphone if available for better "
            "control. 4) Check volume in the space before speaking. 5) Match your volume to the room size."
        )
    return text + "Perfect! You're maintaining good volume. Remember to adjust based on room size and audience distance."


def _tone(analysis: Optional[AnalysisResult]) -> str:
    current = analysis.tone if analysis else "neutral"
    text = f'About your speaking tone: Your latest recording shows "{current}" tone. '
    if current == "nervous":
        return text + (
            "To build confidence: 1) Practice deep breathing exercises (4-7-8 technique) before speaking. "
            "2) Prepare thoroughly - knowledge builds confidence. 3) Start with smaller audiences and work your "
            "way up. 4) Visualize success before you speak. 5) Remember that most nervousness isn't visible to "
            "your audience."
        )
    if current in ("confident", "enthusiastic"):
        return text + "Excellent! You're projecting confidence. Maintain this by continuing to prepare well and practice regularly."
    return text + (
        "To develop a more confident tone: Focus on breathing, preparation, and practice. "
        "Your confidence will grow with each speaking opportunity."
    )


def _speed(analysis: Optional[AnalysisResult]) -> str:
    current = analysis.speed if analysis else "normal"
    text = f'Regarding your speaking speed: Your current pace is "{current}". '
    if current == "fast":
        return text + (
            "To slow down: 1) Practice counting to 2 between sentences. 2) Use punctuation marks as pause "
            "indicators. 3) Record yourself and identify where you rush. 4) Practice reading at half your normal "
            "speed first. 5) Focus on clarity over speed - your audience needs time to process information."
        )
    if current == "slow":
        return text + (
            "To pick up pace slightly: 1) Ensure you're not pausing too long between words. 2) Practice with a "
            "timer to find your natural pace. 3) Eliminate unnecessary filler words. 4) Maintain energy and "
            "engagement. However, slower is often better than too fast!"
        )
    return text + "Perfect! You're speaking at a good pace. Remember: Normal speed with good clarity is ideal for most audiences."


def _clarity(analysis: Optional[AnalysisResult]) -> str:
    current = analysis.clarity if analysis else "good"
    rating = (analysis.ratings.get("clarity") if analysis else None) or DEFAULT_RATING
    text = f'Excellent question about clarity! Your current clarity level is "{current}" with a rating of {rating}/100. '
    if current == "needs-improvement" or rating < 70:
        return text + (
            "Here's your personalized improvement plan: 1) Daily tongue twisters (10 min) - Start with "
            '"She sells seashells", "Peter Piper picked", "Red leather yellow leather". 2) Over-enunciate '
            "practice - Say each word with exaggerated mouth movements, then record and compare. 3) Focus on "
            'consonant endings - Practice words ending in T, D, K, P clearly (like "act", "said", "think", '
            '"stop"). 4) Slow reading technique - Read aloud at 50% your normal speed, emphasizing every '
            "syllable. 5) Mirror practice - Watch your mouth movements while speaking to ensure clear "
            "articulation. 6) Word list practice - Create a list of 20 difficult words and practice them daily "
            'until clear. Your goal: reach "excellent" clarity (90+)!'
        )
    if current == "good" and rating < 85:
        return text + (
            'You\'re on the right track! To reach "excellent" level: 1) Advanced tongue twisters daily. '
            "2) Practice with varied pace - slow for difficult words, normal for easy ones. 3) Record "
            "conversations and identify moments where clarity drops. 4) Practice articulation exercises focusing "
            "on consonant clusters (str, spr, thr sounds). 5) Read technical content aloud to challenge your "
            "articulation."
        )
    return text + (
        "Outstanding! Your clarity is at an excellent level. To maintain this: Continue daily tongue twisters "
        "as warm-up exercises. Practice with different content types (formal, casual, technical). Challenge "
        "yourself with fast-paced reading while maintaining clarity. Share techniques with others - teaching "
        "reinforces your skills."
    )


def _general(analysis: Optional[AnalysisResult], reason: str) -> str:
    text = (
        "I'm here to help you improve your public speaking! You can ask me about: tone, speed, clarity, "
        "volume, pauses, modulation, or confidence. I'll provide detailed, actionable tips for each area."
    )
    if reason == REASON_PROVIDER_ERROR:
        text += (
            " (Note: The AI mentor could not be reached - please check your DEEPSEEK_API_KEY or "
            "OPENAI_API_KEY. Meanwhile, I'm answering from built-in coaching tips.)"
        )
    else:
        text += " (Note: Set DEEPSEEK_API_KEY in .env for even more personalized AI responses)"
    if analysis:
        text += (
            f" Your latest analysis shows: Tone: {analysis.tone}, Speed: {analysis.speed}, "
            f"Clarity: {analysis.clarity}, Volume: {analysis.volume}, Pauses: {analysis.pauses}, "
            f"Modulation: {analysis.modulation}, Confidence Score: {analysis.confidence_score}/100. "
            "Ask me about any of these areas!"
        )
    return text


_TOPIC_RESPONDERS = {
    "modulation": _modulation,
    "pauses": _pauses,
    "volume": _volume,
    "tone": _tone,
    "speed": _speed,
    "clarity": _clarity,
}


def compose_fallback(
    message: str,
    latest_analysis: Optional[AnalysisResult],
    reason: str = REASON_NO_CREDENTIALS,
) -> str:
    topic = detect_topic(message)
    if topic is None:
        return _general(latest_analysis, reason)
    return _TOPIC_RESPONDERS[topic](latest_analysis)
