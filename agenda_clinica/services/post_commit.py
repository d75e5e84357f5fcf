import logging
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class PostCommitTasks:
    """Efeitos colaterais "best-effort" executados depois do commit.

    Cada tarefa roda isolada: uma falha é registrada com contexto e nunca
    chega a quem fez o agendamento.
    """

    def __init__(self):
        self._tasks: List[Tuple[str, Callable, tuple, dict]] = []

    def add(self, name: str, func: Callable, *args, **kwargs) -> None:
        self._tasks.append((name, func, args, kwargs))

    def __len__(self) -> int:
        return len(self._tasks)

    def drain(self) -> int:
        """Executa e esvazia a fila; devolve quantas tarefas falharam."""
        tasks, self._tasks = self._tasks, []
        failures = 0
        for name, func, args, kwargs in tasks:
            try:
                func(*args, **kwargs)
            except Exception:
                failures += 1
                logger.exception("Tarefa pós-commit '%s' falhou", name)
        return failures
