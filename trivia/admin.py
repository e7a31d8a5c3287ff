from django.contrib import admin

from trivia.models import AnalyticsEvent, Document, Project, TriviaExperience


admin.site.register(Project)
admin.site.register(Document)


@admin.register(TriviaExperience)
class TriviaExperienceAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'owner', 'ai_generated', 'share_slug', 'updated_at']
    list_filter = ['ai_generated']


@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    list_display = ['event_type', 'experience', 'question_index', 'created_at']
    list_filter = ['event_type']
