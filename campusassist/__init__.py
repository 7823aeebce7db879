"""
Smart Campus Assistant: rule-based answers to campus questions
(schedules, facilities, dining, library, administration, calendar, FAQs).
"""
