"""Single-page HTML served at ``/`` for browsing and taking quizzes."""

STUDENT_PAGE_HTML = """<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>QuizCraft</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0 auto; padding: 1.5rem; max-width: 56rem; display: flex; flex-direction: column; gap: 1rem; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.75rem 1.25rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; }
      .primary-button:hover { background: #16808a; }
      .primary-button:disabled { opacity: 0.6; cursor: not-allowed; }
      .quiz-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 0.75rem; }
      .quiz-tile { cursor: pointer; }
      .muted { color: #94a3b8; font-size: 0.95rem; }
      .option { display: flex; gap: 0.5rem; align-items: center; padding: 0.6rem; border-radius: 0.5rem; border: 1px solid #1e293b; margin-bottom: 0.4rem; }
      .correct { border-color: #22c55e; }
      .incorrect { border-color: #ef4444; }
      .code-snippet { background: #020617; padding: 0.75rem; border-radius: 0.5rem; overflow-x: auto; }
      input, select { font-size: 1rem; padding: 0.4rem; border-radius: 0.4rem; border: 1px solid #334155; background: #0f172a; color: #f5f7ff; }
      img { max-width: 100%; border-radius: 0.5rem; }
      #status { min-height: 1.25rem; color: #facc15; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src=\"https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js\"></script>
  </head>
  <body>
    <section class=\"card\" id=\"list-card\">
      <h1>Available Quizzes</h1>
      <div id=\"quiz-grid\" class=\"quiz-grid\"></div>
      <p><button id=\"take-all\" class=\"primary-button\">Take All Quizzes</button></p>
    </section>
    <section class=\"card hidden\" id=\"password-card\">
      <h2>Password Required</h2>
      <input id=\"password-input\" type=\"password\" placeholder=\"Enter quiz password\" />
      <button id=\"password-button\" class=\"primary-button\">Start Quiz</button>
    </section>
    <section class=\"hidden\" id=\"quiz-view\">
      <h1 id=\"quiz-title\"></h1>
      <div id=\"questions\"></div>
      <p id=\"status\"></p>
      <button id=\"submit-button\" class=\"primary-button\">Submit Quiz</button>
      <button id=\"back-button\" class=\"primary-button\">Back to Quiz List</button>
    </section>
    <script>
      const listCard = document.getElementById('list-card');
      const quizGrid = document.getElementById('quiz-grid');
      const passwordCard = document.getElementById('password-card');
      const passwordInput = document.getElementById('password-input');
      const quizView = document.getElementById('quiz-view');
      const questionsEl = document.getElementById('questions');
      const statusEl = document.getElementById('status');
      const submitButton = document.getElementById('submit-button');

      let pendingQuizId = null;
      let session = null;

      function setVisibility(element, isVisible) {
        element.classList.toggle('hidden', !isVisible);
      }

      function showList() {
        session = null;
        setVisibility(listCard, true);
        setVisibility(passwordCard, false);
        setVisibility(quizView, false);
        loadQuizzes();
      }

      async function api(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        const body = await response.json().catch(() => ({}));
        if (!response.ok) {
          const error = new Error(typeof body.detail === 'string' ? body.detail : 'Request failed');
          error.status = response.status;
          throw error;
        }
        return body;
      }

      async function loadQuizzes() {
        const quizzes = await api('/api/quizzes');
        quizGrid.innerHTML = '';
        if (quizzes.length === 0) {
          quizGrid.innerHTML = '<p class=\"muted\">No quizzes available yet.</p>';
        }
        quizzes.forEach(quiz => {
          const tile = document.createElement('div');
          tile.className = 'card quiz-tile';
          tile.innerHTML = `<h3></h3><p class=\"muted\">${quiz.question_count} Questions ${quiz.locked ? '&#128274;' : ''}</p>`;
          tile.querySelector('h3').textContent = quiz.title;
          tile.addEventListener('click', () => openQuiz(quiz));
          quizGrid.appendChild(tile);
        });
      }

      function openQuiz(quiz) {
        if (quiz.locked) {
          pendingQuizId = quiz.id;
          passwordInput.value = '';
          setVisibility(listCard, false);
          setVisibility(passwordCard, true);
          return;
        }
        startSession(quiz.id, null);
      }

      async function startSession(quizId, password) {
        try {
          session = await api('/api/sessions', {
            method: 'POST',
            body: JSON.stringify({ quiz_id: quizId, password }),
          });
        } catch (error) {
          if (error.status === 404) {
            showList();
            return;
          }
          window.alert(error.message);
          return;
        }
        setVisibility(listCard, false);
        setVisibility(passwordCard, false);
        setVisibility(quizView, true);
        statusEl.textContent = '';
        renderSession();
      }

      async function sendAnswer(payload) {
        try {
          session = await api(`/api/sessions/${session.session_id}/answers`, {
            method: 'POST',
            body: JSON.stringify(payload),
          });
          renderSession();
        } catch (error) {
          statusEl.textContent = error.message;
        }
      }

      function renderQuestion(question, index) {
        const card = document.createElement('div');
        card.className = 'card';
        const mark = question.is_correct === undefined ? '' : (question.is_correct ? ' &#10004;' : ' &#10008;');
        const source = question.source_title ? `<p class=\"muted\"></p>` : '';
        card.innerHTML = `<h3>Question ${index + 1}${mark}</h3>${source}<div>${question.text_html}</div>${question.code_html || ''}`;
        if (question.source_title) {
          card.querySelector('p.muted').textContent = question.source_title;
        }
        if (question.image) {
          const img = document.createElement('img');
          img.src = question.image.data;
          img.alt = question.image.name;
          card.appendChild(img);
        }
        const locked = session.submitted;
        if (question.type === 'multiple-choice') {
          question.options.forEach(option => {
            const label = document.createElement('label');
            label.className = 'option';
            const input = document.createElement('input');
            input.type = question.is_multiple_answer ? 'checkbox' : 'radio';
            input.checked = option.selected;
            input.disabled = locked;
            input.addEventListener('change', () => sendAnswer({ question_id: question.id, option_id: option.id }));
            const text = document.createElement('span');
            text.textContent = option.text;
            label.append(input, text);
            card.appendChild(label);
          });
        } else if (question.type === 'fill-in-blanks') {
          question.blanks.forEach((blank, blankIndex) => {
            const input = document.createElement('input');
            input.placeholder = `Blank ${blankIndex + 1}`;
            input.value = blank.value;
            input.disabled = locked;
            input.addEventListener('change', () => sendAnswer({ question_id: question.id, blank_id: blank.id, value: input.value }));
            const row = document.createElement('div');
            row.className = 'option';
            row.appendChild(input);
            card.appendChild(row);
          });
        } else {
          question.items.forEach(item => {
            const row = document.createElement('div');
            row.className = 'option';
            const select = document.createElement('select');
            select.disabled = locked || item.pre_filled;
            select.innerHTML = '<option value=\"0\">Position…</option>';
            item.choices.forEach(choice => {
              const opt = document.createElement('option');
              opt.value = choice.position;
              opt.textContent = choice.used ? `${choice.position} (used)` : `${choice.position}`;
              opt.selected = choice.position === item.position;
              select.appendChild(opt);
            });
            select.addEventListener('change', () => sendAnswer({ question_id: question.id, item_id: item.id, position: Number(select.value) }));
            const text = document.createElement('span');
            text.textContent = item.text;
            row.append(select, text);
            card.appendChild(row);
          });
        }
        if (question.is_correct !== undefined) {
          card.classList.add(question.is_correct ? 'correct' : 'incorrect');
        }
        return card;
      }

      function renderSession() {
        document.getElementById('quiz-title').textContent = session.title;
        questionsEl.innerHTML = '';
        session.questions.forEach((question, index) => questionsEl.appendChild(renderQuestion(question, index)));
        setVisibility(submitButton, !session.submitted);
        if (window.MathJax && window.MathJax.typesetPromise) {
          window.MathJax.typesetPromise([questionsEl]).catch(err => console.warn('MathJax error:', err));
        }
      }

      async function submitQuiz() {
        const result = await api(`/api/sessions/${session.session_id}/submit`, { method: 'POST' });
        session = await api(`/api/sessions/${session.session_id}`);
        renderSession();
        statusEl.textContent = `You scored ${result.correct} / ${result.total}: ${result.verdict}!`;
      }

      document.getElementById('password-button').addEventListener('click', () => startSession(pendingQuizId, passwordInput.value));
      document.getElementById('take-all').addEventListener('click', () => startSession('all', null));
      document.getElementById('back-button').addEventListener('click', showList);
      submitButton.addEventListener('click', submitQuiz);

      showList();
    </script>
  </body>
</html>
"""
