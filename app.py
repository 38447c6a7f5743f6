import os
import asyncio
from datetime import datetime
from dotenv import load_dotenv
from nicegui import ui, app
from confirmation import ConfirmationGate
from hydration_store import HydrationStore
from notification_center import NotificationCenter, NotificationRequest, PresentationOptions, PresentationQueue
from notification_delegate import NotificationDelegate, QUICK_ADD_OUNCES
from persistent_storage import create_storage
from reminder_manager import ReminderManager, INTERVAL_HOUR_OPTIONS
from time_service import time_service

# Load environment variables
load_dotenv()

RESET_TODAY = 'reset_today'
RESET_ALL = 'reset_all'

# Short chime played in the browser when a reminder is shown
CHIME_JS = '''
    const ctx = new (window.AudioContext || window.webkitAudioContext)();
    const osc = ctx.createOscillator();
    osc.frequency.value = 880;
    osc.connect(ctx.destination);
    osc.start();
    osc.stop(ctx.currentTime + 0.25);
'''


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {'1', 'true', 'yes', 'on'}


class HydrationTrackerApp:
    def __init__(self):
        # Configuration from .env
        self.data_dir = os.getenv('HYDRATION_DATA_DIR', 'data')
        self.notification_check_seconds = float(os.getenv('NOTIFICATION_CHECK_SECONDS', 30))
        self.notifications_allowed = _env_flag('NOTIFICATIONS_ALLOWED', 'true')
        self.time_sync_enabled = _env_flag('TIME_SYNC_ENABLED', 'false')
        self.port = int(os.getenv('APP_PORT', 8080))
        self.title = os.getenv('APP_TITLE', 'Hydration Tracker')

        self.storage = create_storage(self.data_dir)
        self.store = HydrationStore(self.storage)

        # Reminders are delivered by the in-process notification center
        self.notification_center = NotificationCenter(
            permission_handler=self._request_permission,
            default_permission=self.notifications_allowed,
            check_interval_seconds=self.notification_check_seconds,
        )
        self.notification_center.delegate = NotificationDelegate(self.store)
        self.notification_center.presenter = self._queue_notification
        self.reminder_manager = ReminderManager(self.storage, self.notification_center)

        self.confirmations = ConfirmationGate()
        # Shown by the next client poll; bounded while no page is open
        self.delivered_notifications = PresentationQueue(max_age_seconds=max(self.notification_check_seconds, 60.0))

        # Reactive UI data - these will automatically update the UI when changed
        self.ui_data = {
            'progress': 0.0,
            'progress_text': '',
            'amount_text': '',
            'remaining_text': '',
            'entry_log': '',
            'reminder_summary': '',
            'upcoming_text': '',
            'stats_text': '',
        }

        self._data_refresh_task = None
        self._app_initialized = False

    async def _request_permission(self) -> bool:
        """Ask the browser user whether reminders may be shown"""
        if not self.notifications_allowed:
            return False
        try:
            result = await ui.run_javascript('''
                return confirm("Allow hydration reminders?");
            ''', timeout=60.0)
            return bool(result)
        except RuntimeError as e:
            if "slot stack" in str(e):
                # No page context (startup restore) - fall back to configuration
                print("🔔 No client to ask, using configured notification permission")
                return self.notifications_allowed
            raise
        except TimeoutError:
            print("⚠️ Permission prompt timed out")
            return False

    def _queue_notification(self, request: NotificationRequest, options: PresentationOptions):
        """Presenter for the notification center; the page shows queued reminders"""
        self.delivered_notifications.push(request, options)

    async def initialize_app(self):
        """Sync time if configured and restore reminders"""
        if self._app_initialized:
            print("⚠️ App already initialized, skipping duplicate initialization")
            return

        print("🚀 Starting app initialization...")
        try:
            if self.time_sync_enabled and not time_service.last_sync_time:
                print("🕐 Syncing time with API...")
                await time_service.sync_time()

            await self.notification_center.start()
            await self.reminder_manager.restore()

            print("💧 Hydration Tracker Initialized:")
            print(f"   🎯 Daily goal: {self.store.daily_goal:g}oz, today: {self.store.today_amount:g}oz")
            print(f"   ⏰ Reminders: {self.reminder_manager.state.value}")
            print("✅ App initialization complete")
        except Exception as e:
            print(f"❌ Error initializing app: {e}")
        finally:
            self._app_initialized = True

    async def shutdown(self):
        if self._data_refresh_task and not self._data_refresh_task.done():
            self._data_refresh_task.cancel()
            try:
                await asyncio.wait_for(self._data_refresh_task, timeout=2.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass
        await self.notification_center.stop()
        print("✅ Shutdown complete")

    def _start_data_refresh_task(self):
        """Start the periodic data refresh task for reactive UI updates"""
        if self._data_refresh_task and not self._data_refresh_task.done():
            return

        async def refresh_data():
            try:
                while True:
                    self._update_ui_data()
                    await asyncio.sleep(1.0)
            except asyncio.CancelledError:
                print("Data refresh task cancelled")
                raise
            except Exception as e:
                print(f"❌ Error in data refresh: {e}")

        self._data_refresh_task = asyncio.create_task(refresh_data())

    def _update_ui_data(self):
        """Update reactive UI data properties"""
        store = self.store
        self.ui_data['progress'] = store.today_progress
        self.ui_data['progress_text'] = f'{int(store.today_progress * 100)}%'
        self.ui_data['amount_text'] = f'{int(store.today_amount)} oz of {int(store.daily_goal)} oz'
        if store.remaining_amount > 0:
            self.ui_data['remaining_text'] = f'{int(store.remaining_amount)} oz remaining'
        else:
            self.ui_data['remaining_text'] = '🎉 Goal reached!'

        log_text = ''
        for entry in reversed(store.today_entries):
            log_text += f'[{entry.time_string}] {entry.amount:g} oz\n'
        self.ui_data['entry_log'] = log_text or 'No entries yet today'

        self.ui_data['stats_text'] = f"Today's entries: {len(store.today_entries)} | Total: {int(store.today_amount)} oz"

        manager = self.reminder_manager
        config = manager.config
        hours = config.interval_seconds / 3600
        self.ui_data['reminder_summary'] = (
            f'Every {hours:g}h from {config.start_time.strftime("%H:%M")} to {config.end_time.strftime("%H:%M")}'
            f' ({manager.reminders_per_day()} per day) - {manager.state.value}'
        )
        upcoming = manager.upcoming_reminders(limit=5)
        self.ui_data['upcoming_text'] = '\n'.join(
            request.fire_at.strftime('%a %H:%M') for request in upcoming
        ) or 'No upcoming reminders'

    # UI actions

    def add_drink(self, amount: float):
        self.store.add_entry(amount)
        self._update_ui_data()
        ui.notify(f'💧 Added {amount:g} oz', type='positive', position='top-right')

    def undo_last_entry(self):
        today = self.store.today_entries
        if not today:
            ui.notify('Nothing to undo', type='info')
            return
        self.store.remove_entry(today[-1].id)
        self._update_ui_data()

    def save_goal(self, goal):
        if goal is None:
            ui.notify('Pick a goal first', type='warning')
            return
        try:
            self.store.update_daily_goal(goal)
            ui.notify(f'🎯 Goal saved: {goal:g} oz', type='positive')
        except ValueError as e:
            ui.notify(f'❌ {e}', type='negative')
        self._update_ui_data()

    async def on_reminder_toggle(self, event, switch):
        await self.reminder_manager.toggle_reminders(bool(event.value))
        # Reflect a denied permission in the switch
        if switch.value != self.reminder_manager.is_reminders_enabled:
            switch.set_value(self.reminder_manager.is_reminders_enabled)
            ui.notify('🔕 Notifications not allowed, reminders are off', type='warning')
        self._update_ui_data()

    def on_interval_change(self, event):
        self.reminder_manager.update_reminder_interval(int(event.value) * 3600)
        self._update_ui_data()

    def on_start_time_change(self, event):
        if event.value:
            self.reminder_manager.update_reminder_start_time(datetime.strptime(event.value, '%H:%M'))
            self._update_ui_data()

    def on_end_time_change(self, event):
        if event.value:
            self.reminder_manager.update_reminder_end_time(datetime.strptime(event.value, '%H:%M'))
            self._update_ui_data()

    def _confirm_dialog(self, key: str, title: str, message: str, button: str, action):
        """Park a destructive action behind a confirmation dialog"""
        self.confirmations.request(key, action)

        with ui.dialog() as dialog, ui.card():
            ui.label(title).classes('text-lg font-semibold')
            ui.label(message).classes('text-sm')

            def on_confirm():
                self.confirmations.confirm(key)
                dialog.close()
                self._update_ui_data()

            def on_cancel():
                self.confirmations.cancel(key)
                dialog.close()

            with ui.row().classes('w-full justify-end gap-2'):
                ui.button('Cancel', on_click=on_cancel).props('flat')
                ui.button(button, on_click=on_confirm).classes('bg-red-600')

        dialog.on('hide', lambda: self.confirmations.cancel(key))
        dialog.open()

    def ask_reset_today(self):
        self._confirm_dialog(
            RESET_TODAY,
            "Reset Today's Progress",
            "Are you sure you want to clear all of today's hydration entries?",
            'Reset',
            self.store.clear_today,
        )

    def ask_reset_all(self):
        self._confirm_dialog(
            RESET_ALL,
            'Reset All Data',
            'This deletes every entry and restores the default 64 oz goal.',
            'Delete',
            self.store.reset_all_data,
        )

    def _show_delivered_notifications(self):
        """Show reminders delivered since the last poll"""
        for request, options in self.delivered_notifications.drain():
            category = self.notification_center.category(request.content.category_identifier)

            if options.sound:
                ui.run_javascript(CHIME_JS)
            if not options.banner:
                continue

            ui.notify(f'🔔 {request.content.title}', type='info', position='top-right')

            with ui.dialog() as dialog, ui.card():
                ui.label(f'🔔 {request.content.title}').classes('text-lg font-semibold')
                ui.label(request.content.body).classes('text-sm')
                with ui.row().classes('w-full justify-end gap-2'):
                    actions = category.actions if category else []
                    for action in actions:
                        def respond(action_identifier=action.identifier, identifier=request.identifier):
                            self.notification_center.respond(identifier, action_identifier)
                            dialog.close()
                            self._update_ui_data()
                        button = ui.button(action.title, on_click=respond)
                        if action.destructive:
                            button.props('flat')
            dialog.open()

    def create_ui(self):
        """Create the main UI"""
        ui.page_title(self.title)

        with ui.card().classes('w-full max-w-md mx-auto p-4'):
            ui.label(f'💧 {self.title}').classes('text-2xl font-bold text-center mb-4')

            with ui.tabs().classes('w-full') as tabs:
                progress_tab = ui.tab('Progress', icon='water_drop')
                add_tab = ui.tab('Add', icon='add')
                reminders_tab = ui.tab('Reminders', icon='notifications')
                settings_tab = ui.tab('Settings', icon='settings')

            with ui.tab_panels(tabs, value=progress_tab).classes('w-full'):
                # Progress
                with ui.tab_panel(progress_tab):
                    ui.label('Hydration').classes('text-xl font-semibold')
                    ui.linear_progress(show_value=False).classes('my-2').bind_value_from(self.ui_data, 'progress')
                    ui.label().classes('text-3xl font-bold').bind_text_from(self.ui_data, 'progress_text')
                    ui.label().classes('text-md').bind_text_from(self.ui_data, 'amount_text')
                    ui.label().classes('text-sm text-gray-500').bind_text_from(self.ui_data, 'remaining_text')

                    ui.label('Add Water').classes('text-lg font-semibold mt-4')
                    with ui.row().classes('gap-2'):
                        for amount in [4.0] + self.store.COMMON_SIZES:
                            ui.button(f'+ {amount:g} oz', on_click=lambda a=amount: self.add_drink(a))

                    ui.textarea().classes('w-full mt-4').props('readonly rows=5').bind_value_from(self.ui_data, 'entry_log')
                    with ui.row().classes('w-full gap-2'):
                        ui.button('Undo Last', on_click=self.undo_last_entry).props('flat')
                        ui.button('Reset Today', on_click=self.ask_reset_today).classes('bg-red-500')

                # Add drink
                with ui.tab_panel(add_tab):
                    ui.label('Add Water').classes('text-xl font-semibold')
                    amount_select = ui.select(
                        {amount: f'{int(amount)} oz' for amount in self.store.ADD_AMOUNTS},
                        value=QUICK_ADD_OUNCES,
                    ).classes('w-full')
                    ui.button('Add', on_click=lambda: self.add_drink(amount_select.value)).classes('w-full mt-2')
                    ui.label("Today's Progress").classes('text-md mt-4')
                    ui.linear_progress(show_value=False).bind_value_from(self.ui_data, 'progress')
                    ui.label().bind_text_from(self.ui_data, 'amount_text')

                # Reminders
                with ui.tab_panel(reminders_tab):
                    manager = self.reminder_manager
                    config = manager.config
                    ui.label('Hydration Reminders').classes('text-xl font-semibold')
                    reminder_switch = ui.switch(
                        'Enable Reminders',
                        value=manager.is_reminders_enabled,
                        on_change=lambda e: self.on_reminder_toggle(e, reminder_switch),
                    )

                    with ui.column().classes('w-full').bind_visibility_from(reminder_switch, 'value'):
                        ui.label('Remind me every:')
                        ui.select(
                            {hours: f'{hours} hour{"s" if hours > 1 else ""}' for hours in INTERVAL_HOUR_OPTIONS},
                            value=max(1, min(6, round(config.interval_seconds / 3600))),
                            on_change=self.on_interval_change,
                        ).classes('w-full')

                        ui.label('Active hours:')
                        with ui.row().classes('w-full gap-4'):
                            with ui.column():
                                ui.label('Start')
                                ui.time(value=config.start_time.strftime('%H:%M'), on_change=self.on_start_time_change)
                            with ui.column():
                                ui.label('End')
                                ui.time(value=config.end_time.strftime('%H:%M'), on_change=self.on_end_time_change)

                        ui.label().classes('text-sm text-gray-600').bind_text_from(self.ui_data, 'reminder_summary')
                        ui.label('Upcoming').classes('text-md font-semibold mt-2')
                        ui.label().classes('text-sm font-mono whitespace-pre').bind_text_from(self.ui_data, 'upcoming_text')

                    ui.label('Tips').classes('text-md font-semibold mt-4')
                    ui.label('• Set active hours for when you\'re awake').classes('text-xs text-gray-500')
                    ui.label('• An end time before the start runs past midnight').classes('text-xs text-gray-500')

                # Settings
                with ui.tab_panel(settings_tab):
                    ui.label('Daily Goal').classes('text-xl font-semibold')
                    ui.label('How much water do you want to drink each day?').classes('text-sm text-gray-500')
                    goal_select = ui.select(
                        {amount: f'{int(amount)} oz' for amount in self.store.GOAL_OPTIONS},
                        value=self.store.daily_goal if self.store.daily_goal in self.store.GOAL_OPTIONS else None,
                    ).classes('w-full')
                    ui.button('Save Goal', on_click=lambda: self.save_goal(goal_select.value)).classes('w-full mt-2')

                    with ui.expansion('🗂️ Data Management', icon='storage').classes('w-full mt-4'):
                        ui.label().classes('text-sm').bind_text_from(self.ui_data, 'stats_text')
                        with ui.row().classes('w-full gap-2 mt-2'):
                            ui.button("Clear Today's Data", on_click=self.ask_reset_today).classes('flex-1 bg-orange-500')
                            ui.button('Reset All Data', on_click=self.ask_reset_all).classes('flex-1 bg-red-600')

        self._update_ui_data()

        # Poll for delivered reminders in this client's context
        ui.timer(1.0, callback=self._show_delivered_notifications)

        # Start the data refresh task now that the UI context is available
        self._start_data_refresh_task()


# Global app instance
hydration_app = HydrationTrackerApp()


@ui.page('/')
async def index():
    hydration_app.create_ui()


# Startup and shutdown handlers
async def on_startup():
    """App startup handler"""
    try:
        await hydration_app.initialize_app()
    except Exception as e:
        print(f"❌ Error during startup: {e}")


async def on_shutdown():
    """App shutdown handler"""
    try:
        await hydration_app.shutdown()
    except Exception as e:
        print(f"❌ Error during shutdown: {e}")

app.on_startup(on_startup)
app.on_shutdown(on_shutdown)

if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title=hydration_app.title,
        port=hydration_app.port,
        show=True,
        reload=False
    )
