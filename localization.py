class Translator:
    def __init__(self) -> None:
        self.language = "en"
        self.translations = {
            "en": {},
            "es": {
                "Workout saved.": "Entrenamiento guardado.",
                "Failed to save set. Please check your connection and try again.": (
                    "No se pudo guardar la serie. Revisa tu conexión e inténtalo de nuevo."
                ),
                "Please enter valid numbers for weight and reps before saving.": (
                    "Introduce números válidos de peso y repeticiones antes de guardar."
                ),
                "Could not load the latest workout.": (
                    "No se pudo cargar el entrenamiento más reciente."
                ),
                "The requested workout was not found.": (
                    "No se encontró el entrenamiento solicitado."
                ),
                "Invalid workout data: missing workouts array.": (
                    "Datos de entrenamiento no válidos: falta la lista de ejercicios."
                ),
                "Your latest workout updates are still syncing. Leaving now may discard them.": (
                    "Tus últimos cambios aún se están sincronizando. Si sales ahora podrías perderlos."
                ),
                "Could not identify the exercise to replace.": (
                    "No se pudo identificar el ejercicio que deseas reemplazar."
                ),
                "Could not identify the selected alternative.": (
                    "No se pudo identificar la alternativa seleccionada."
                ),
                "Could not replace the exercise.": "No se pudo reemplazar el ejercicio.",
                "Exercise replaced.": "Ejercicio reemplazado correctamente.",
                'Exercise replaced with "{name}".': 'Ejercicio reemplazado por "{name}".',
                "Rest": "Descanso",
                "Rest elapsed": "Descanso terminado",
            },
        }

    def set_language(self, lang: str) -> None:
        self.language = lang

    def gettext(self, key: str) -> str:
        return self.translations.get(self.language, {}).get(key, key)

translator = Translator()
